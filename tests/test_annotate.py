"""Tests for result annotation and the result file writers."""

import pandas as pd
import pytest

from mutexfinder.core.alteration_matrix import AlterationMatrix
from mutexfinder.core.pattern import PatternType
from mutexfinder.io.annotate import (
    REACTOME_ID_PREFIX,
    MissingGenesError,
    add_pathway_names,
    annotate_set_members,
)
from mutexfinder.io.sources import PathwayTable, RankedGeneTable
from mutexfinder.io.writers import (
    read_member_pvalues,
    read_result_table,
    write_member_pvalues,
    write_result_table,
)


@pytest.fixture
def member_matrix():
    return AlterationMatrix.from_rows(
        {
            "A": [1, 1, 0, 0],
            "B": [0, 1, 1, 0],
            "C": [0, 0, 0, 1],
        },
        ["s1", "s2", "s3", "s4"],
    )


class TestMemberPvalueFiles:
    """Per-gene p-value files."""

    def test_sorted_with_name_ties(self, tmp_path):
        path = write_member_pvalues(
            tmp_path, "SET", PatternType.MUTEX, {"B": 0.5, "A": 0.5, "C": 0.01}
        )
        assert path.name == "SET-mutex.txt"
        assert path.read_text() == "C\t0.01\nA\t0.5\nB\t0.5\n"

    def test_read_preserves_order(self, tmp_path):
        write_member_pvalues(tmp_path, "SET", PatternType.COOC, {"X": 1.0, "Y": 0.25})
        assert list(read_member_pvalues(tmp_path / "SET-cooc.txt").items()) == [
            ("Y", 0.25), ("X", 1.0),
        ]

    def test_malformed_line(self, tmp_path):
        path = tmp_path / "bad-mutex.txt"
        path.write_text("A\t0.1\textra\n")
        with pytest.raises(ValueError, match="expected"):
            read_member_pvalues(path)


class TestAddPathwayNames:
    def test_names_inserted_after_id(self, tmp_path):
        pathways = tmp_path / "pathways.tsv"
        pathways.write_text(
            f"{REACTOME_ID_PREFIX}R-HSA-1\tPI3K cascade\tPIK3CA PTEN\n"
            "LOCAL-7\tLocal set\tA B\n"
        )
        results = pd.DataFrame({
            "ID": ["R-HSA-1", "LOCAL-7", "R-HSA-9"],
            "Genes size": [2, 2, 3],
            "Mutex p-value": [0.01, 0.2, 0.5],
        })
        write_result_table(results, tmp_path / "results.txt")

        named = add_pathway_names(
            tmp_path / "results.txt",
            tmp_path / "named.txt",
            PathwayTable(pathways),
            id_prefix=REACTOME_ID_PREFIX,
        )
        assert list(named.columns) == ["ID", "Name", "Genes size", "Mutex p-value"]
        assert list(named["Name"]) == ["PI3K cascade", "Local set", ""]

        written = read_result_table(tmp_path / "named.txt")
        assert list(written["Name"]) == ["PI3K cascade", "Local set", ""]


class TestAnnotateSetMembers:
    """Member tables built from per-gene files."""

    def test_table(self, tmp_path, member_matrix):
        write_member_pvalues(tmp_path, "SET", PatternType.MUTEX, {"A": 0.01, "B": 0.02, "C": 0.5})

        table = annotate_set_members(tmp_path / "SET-mutex.txt", member_matrix, tmp_path / "out.txt")

        assert list(table.columns) == ["Rank", "Gene", "Mut#", "Ov", "P-val", "Specific overlaps"]
        assert list(table["Gene"]) == ["A", "B", "C"]
        assert list(table["Mut#"]) == [2, 2, 1]
        assert list(table["Ov"]) == [1, 1, 0]
        assert list(table["Specific overlaps"]) == ["B=1", "A=1", ""]
        assert list(table["Rank"]) == ["", "", ""]
        assert (tmp_path / "out.txt").read_text().startswith(
            "Rank\tGene\tMut#\tOv\tP-val\tSpecific overlaps\n"
        )

    def test_overlaps_ordered_by_size(self, tmp_path):
        matrix = AlterationMatrix.from_rows(
            {
                "A": [1, 1, 1, 0],
                "B": [1, 0, 0, 0],
                "C": [1, 1, 0, 0],
                "D": [0, 0, 0, 1],
            },
            ["s1", "s2", "s3", "s4"],
        )
        write_member_pvalues(tmp_path, "SET", PatternType.COOC, {"A": 0.1, "B": 0.2, "C": 0.3, "D": 0.4})
        table = annotate_set_members(tmp_path / "SET-cooc.txt", matrix, tmp_path / "out.txt")
        assert table.loc[0, "Specific overlaps"] == "C=2 B=1"
        assert table.loc[0, "Ov"] == 3

    def test_rank_column(self, tmp_path, member_matrix):
        ranked_path = tmp_path / "ranked.tsv"
        ranked_path.write_text("A\t1\nC\t3\n")
        write_member_pvalues(tmp_path, "SET", PatternType.MUTEX, {"A": 0.01, "B": 0.02, "C": 0.5})

        table = annotate_set_members(
            tmp_path / "SET-mutex.txt", member_matrix, tmp_path / "out.txt",
            classifier=RankedGeneTable(ranked_path),
        )
        assert list(table["Rank"]) == ["1", "", "3"]

    def test_missing_gene(self, tmp_path, member_matrix):
        write_member_pvalues(tmp_path, "SET", PatternType.MUTEX, {"A": 0.01, "ZZZ": 0.02})
        with pytest.raises(MissingGenesError, match="missing"):
            annotate_set_members(tmp_path / "SET-mutex.txt", member_matrix, tmp_path / "out.txt")
        assert not (tmp_path / "out.txt").exists()
