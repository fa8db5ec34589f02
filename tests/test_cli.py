"""Tests for the mutexfinder command-line dispatcher."""

import pytest

from mutexfinder.cli import main
from mutexfinder.io.loaders import load_matrix
from mutexfinder.io.writers import read_result_table, write_matrix


@pytest.fixture
def matrix_file(tmp_path, random_matrix):
    path = tmp_path / "matrix.txt"
    write_matrix(random_matrix, path)
    return path


@pytest.fixture
def sets_file(tmp_path):
    path = tmp_path / "sets.txt"
    path.write_text("S1\tG0 G1 G2\nS2\tG3 G4\nS3\tG5\n")
    return path


@pytest.fixture
def events_file(tmp_path):
    path = tmp_path / "events.tsv"
    rows = ["sample\tgene\tphenotype"]
    for i in range(12):
        rows.append(f"case{i}\t{'AB'[i % 2]}\tcase")
        rows.append(f"case{i}\tC{i % 3}\tcase")
        rows.append(f"ctrl{i}\t{'AB'[i % 2]}\tcontrol")
        rows.append(f"ctrl{i}\tC{i % 4}\tcontrol")
    path.write_text("\n".join(rows) + "\n")
    return path


class TestDispatcher:
    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "mutexfinder" in capsys.readouterr().out

    def test_invalid_fdr_rejected(self, tmp_path):
        with pytest.raises(SystemExit):
            main([
                "explore-significance", "-i", str(tmp_path / "r.txt"), "-o", str(tmp_path / "e.txt"),
                "--pattern", "mutex", "--fdr", "2.0",
            ])

    def test_missing_input_returns_error(self, tmp_path, sets_file):
        code = main([
            "calculate", "--matrix", str(tmp_path / "absent.txt"),
            "--gene-sets", str(sets_file), "-o", str(tmp_path / "out"),
        ])
        assert code == 1


class TestCalculate:
    """calculate and calculate-differential commands."""

    def test_gene_set_file(self, tmp_path, matrix_file, sets_file):
        out = tmp_path / "out"
        code = main([
            "calculate", "--matrix", str(matrix_file), "--gene-sets", str(sets_file),
            "-o", str(out), "-n", "8", "--randomization-strength", "2", "--seed", "1",
        ])
        assert code == 0

        results = read_result_table(out / "results.txt")
        assert sorted(results["ID"]) == ["S1", "S2"]
        assert (out / "S1-mutex.txt").exists()
        assert (out / "S2-cooc.txt").exists()

    def test_config_file(self, tmp_path, matrix_file, sets_file):
        config = tmp_path / "run.yaml"
        config.write_text("permutation:\n  iterations: 4\n  randomization_strength: 2\n  seed: 5\n")
        out = tmp_path / "out"
        code = main([
            "calculate", "--matrix", str(matrix_file), "--gene-sets", str(sets_file),
            "-o", str(out), "--config", str(config),
        ])
        assert code == 0
        results = read_result_table(out / "results.txt")
        for p in results["Mutex p-value"]:
            assert p * 4 == int(p * 4)

    def test_bad_config_returns_error(self, tmp_path, matrix_file, sets_file):
        config = tmp_path / "run.yaml"
        config.write_text("permutation:\n  iterations: -1\n")
        code = main([
            "calculate", "--matrix", str(matrix_file), "--gene-sets", str(sets_file),
            "-o", str(tmp_path / "out"), "--config", str(config),
        ])
        assert code == 1

    def test_pathways_get_names(self, tmp_path, matrix_file):
        pathways = tmp_path / "pathways.tsv"
        pathways.write_text(
            "http://identifiers.org/reactome/R-HSA-1\tFirst\tG0 G1\n"
            "http://identifiers.org/reactome/R-HSA-2\tSecond\tG2 G3 G4\n"
        )
        out = tmp_path / "out"
        code = main([
            "calculate", "--matrix", str(matrix_file), "--pathways", str(pathways),
            "--pathway-id-prefix", "http://identifiers.org/reactome/",
            "-o", str(out), "-n", "3", "--randomization-strength", "2", "--seed", "1",
        ])
        assert code == 0
        named = read_result_table(out / "results-with-names.txt")
        assert dict(zip(named["ID"], named["Name"])) == {"R-HSA-1": "First", "R-HSA-2": "Second"}

    def test_ranked_genes(self, tmp_path, matrix_file):
        ranked = tmp_path / "ranked.tsv"
        ranked.write_text("G0\t1\nG1\t1\nG2\t2\n")
        out = tmp_path / "out"
        code = main([
            "calculate", "--matrix", str(matrix_file), "--ranked-genes", str(ranked),
            "--max-rank", "3", "-o", str(out), "-n", "3", "--randomization-strength", "2",
        ])
        assert code == 0
        assert list(read_result_table(out / "results.txt")["ID"]) != []

    def test_differential_from_events(self, tmp_path, events_file):
        sets = tmp_path / "sets.txt"
        sets.write_text("AB\tA B\n")
        out = tmp_path / "diff"
        code = main([
            "calculate-differential", "--events", str(events_file),
            "--test-filter", "phenotype=case", "--ctrl-filter", "phenotype=control",
            "--gene-sets", str(sets), "-o", str(out),
            "-n", "5", "--randomization-strength", "2", "--seed", "2",
        ])
        assert code == 0
        results = read_result_table(out / "results.txt")
        assert "Differential mutex p-value" in results.columns

    def test_differential_needs_both_matrices(self, tmp_path, matrix_file, sets_file):
        code = main([
            "calculate-differential", "--test-matrix", str(matrix_file),
            "--gene-sets", str(sets_file), "-o", str(tmp_path / "out"),
        ])
        assert code == 1


class TestGenerateMatrix:
    def test_filtered_events(self, tmp_path, events_file):
        out = tmp_path / "matrix.txt"
        code = main([
            "generate-matrix", "--events", str(events_file),
            "--filter", "phenotype=case", "-o", str(out),
        ])
        assert code == 0
        matrix = load_matrix(out)
        assert all(s.startswith("case") for s in matrix.samples)
        assert set(matrix.genes) == {"A", "B", "C0", "C1", "C2"}


class TestPostProcessing:
    """Commands working on the output of a calculate run."""

    @pytest.fixture
    def run_dir(self, tmp_path, matrix_file, sets_file):
        out = tmp_path / "out"
        assert main([
            "calculate", "--matrix", str(matrix_file), "--gene-sets", str(sets_file),
            "-o", str(out), "-n", "5", "--randomization-strength", "2", "--seed", "3",
        ]) == 0
        return out

    def test_explore_significance(self, tmp_path, run_dir):
        out = tmp_path / "explore.txt"
        code = main([
            "explore-significance", "-i", str(run_dir / "results.txt"), "-o", str(out),
            "--pattern", "mutex", "--fdr", "0.1", "0.2",
        ])
        assert code == 0
        assert out.read_text().startswith("Tested size\tHit thr\tFDR=0.1\tFDR=0.2\n")

    def test_filter_results(self, tmp_path, run_dir):
        out = tmp_path / "top.txt"
        code = main([
            "filter-results-to-most-hit", "-i", str(run_dir / "results.txt"), "-o", str(out),
            "--pattern", "cooc", "--top", "1",
        ])
        assert code == 0
        assert len(read_result_table(out)) == 1

    def test_annotate_members(self, tmp_path, run_dir, matrix_file):
        out = tmp_path / "members.txt"
        code = main([
            "annotate-set-members", "-i", str(run_dir / "S1-mutex.txt"),
            "--matrix", str(matrix_file), "-o", str(out),
        ])
        assert code == 0
        assert sorted(read_result_table(out)["Gene"]) == ["G0", "G1", "G2"]

    def test_find_significant_members(self, tmp_path, run_dir):
        out = tmp_path / "significant.txt"
        code = main([
            "find-significant-members", "-d", str(run_dir), "-o", str(out),
            "--pattern", "mutex", "--fdr", "0.05",
        ])
        assert code == 0
        assert out.exists()

    def test_add_pathway_names(self, tmp_path, run_dir):
        pathways = tmp_path / "pathways.tsv"
        pathways.write_text("S1\tSet one\tG0 G1 G2\n")
        out = tmp_path / "named.txt"
        code = main([
            "add-pathway-names", "-i", str(run_dir / "results.txt"), "-o", str(out),
            "--pathways", str(pathways),
        ])
        assert code == 0
        named = read_result_table(out)
        assert dict(zip(named["ID"], named["Name"]))["S1"] == "Set one"
