"""Tests for run configuration files and CLI override."""

import json
from argparse import Namespace

import pytest

from mutexfinder.cli import main
from mutexfinder.cli.config import (
    RunConfig,
    load_config,
    merge_config_with_args,
    validate_config,
)
from mutexfinder.core.pattern import PatternType
from mutexfinder.io.writers import read_result_table, write_matrix


def _defaults(**overrides):
    values = dict(iterations=1000, randomization_strength=100, seed=None, n_jobs=1, output=None)
    values.update(overrides)
    return Namespace(**values)


class TestLoadConfig:
    """Reading YAML and JSON config files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("permutation:\n  iterations: 5000\n  seed: 42\n")
        assert load_config(path) == {"permutation": {"iterations": 5000, "seed": 42}}

    def test_json(self, tmp_path):
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"permutation": {"n_jobs": 4}}))
        assert load_config(path)["permutation"]["n_jobs"] == 4

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "run.yml"
        path.write_text("")
        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "run.toml"
        path.write_text("iterations = 3\n")
        with pytest.raises(ValueError, match="Unsupported"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("permutation: [unclosed\n")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(path)

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)


class TestValidateConfig:
    def test_defaults(self):
        assert validate_config({}) == RunConfig()
        assert RunConfig().randomization_strength == 100

    def test_values(self):
        config = validate_config({"permutation": {"iterations": 10, "seed": 0, "n_jobs": 2}})
        assert config == RunConfig(iterations=10, randomization_strength=100, seed=0, n_jobs=2)

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown permutation settings"):
            validate_config({"permutation": {"iteration": 10}})

    @pytest.mark.parametrize("value", [0, -5, 2.5, True, "10"])
    def test_invalid_iterations(self, value):
        with pytest.raises(ValueError, match="iterations"):
            validate_config({"permutation": {"iterations": value}})

    def test_invalid_seed(self):
        with pytest.raises(ValueError, match="seed"):
            validate_config({"permutation": {"seed": -1}})


class TestMergeConfig:
    """Explicit CLI arguments override config values."""

    CONFIG = {"permutation": {"iterations": 50, "seed": 3, "n_jobs": 2}}

    def test_config_fills_defaults(self):
        merged = merge_config_with_args(self.CONFIG, _defaults())
        assert merged.iterations == 50
        assert merged.seed == 3
        assert merged.n_jobs == 2
        assert merged.randomization_strength == 100

    def test_explicit_long_option_wins(self):
        args = _defaults(iterations=10)
        merged = merge_config_with_args(self.CONFIG, args, ["--iterations", "10", "-o", "out"])
        assert merged.iterations == 10
        assert merged.seed == 3

    def test_explicit_short_option_wins(self):
        args = _defaults(iterations=10, n_jobs=8)
        merged = merge_config_with_args(self.CONFIG, args, ["-n", "10", "--n-jobs=8"])
        assert merged.iterations == 10
        assert merged.n_jobs == 8
        assert merged.seed == 3

    @pytest.mark.parametrize("cli_args", [["-n7"], ["-vn7"], ["-vn", "7"]])
    def test_glued_short_option_wins(self, cli_args):
        merged = merge_config_with_args(self.CONFIG, _defaults(iterations=7), cli_args)
        assert merged.iterations == 7
        assert merged.seed == 3

    def test_glued_seed_and_jobs_win(self):
        args = _defaults(seed=42, n_jobs=4)
        merged = merge_config_with_args(self.CONFIG, args, ["-s42", "-j4"])
        assert merged.seed == 42
        assert merged.n_jobs == 4
        assert merged.iterations == 50

    def test_abbreviated_long_option_rejected(self, tmp_path):
        with pytest.raises(SystemExit):
            main([
                "calculate", "--matrix", str(tmp_path / "m.txt"),
                "--gene-sets", str(tmp_path / "s.txt"), "-o", str(tmp_path / "out"),
                "--iter", "7",
            ])

    def test_glued_option_beats_config_end_to_end(self, tmp_path, random_matrix):
        matrix_file = tmp_path / "matrix.txt"
        write_matrix(random_matrix, matrix_file)
        sets_file = tmp_path / "sets.txt"
        sets_file.write_text("S1\tG0 G1 G2\n")
        config = tmp_path / "run.yaml"
        config.write_text("permutation:\n  iterations: 50\n  randomization_strength: 2\n  seed: 1\n")
        out = tmp_path / "out"

        code = main([
            "calculate", "--matrix", str(matrix_file), "--gene-sets", str(sets_file),
            "-o", str(out), "--config", str(config), "-n7",
        ])

        assert code == 0
        for p in read_result_table(out / "results.txt")["Mutex p-value"]:
            assert round(p * 7) / 7 == pytest.approx(p)

    def test_original_args_untouched(self):
        args = _defaults()
        merge_config_with_args(self.CONFIG, args)
        assert args.iterations == 1000


class TestPatternType:
    """Pattern names used on the command line."""

    @pytest.mark.parametrize("tag, expected", [
        ("mutex", PatternType.MUTEX),
        ("mutual-exclusivity", PatternType.MUTEX),
        ("COOC", PatternType.COOC),
        ("co-occurrence", PatternType.COOC),
    ])
    def test_get(self, tag, expected):
        assert PatternType.get(tag) is expected

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown pattern type"):
            PatternType.get("both")

    def test_columns_and_suffixes(self):
        assert PatternType.MUTEX.pvalue_column == "Mutex p-value"
        assert PatternType.COOC.file_suffix == "-cooc.txt"
