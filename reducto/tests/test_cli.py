"""Tests for CLI module."""

import subprocess
import sys

import pytest

from reducto import SequencedSimplifier, Simplifier, SimplifyOptions
from reducto.cli import DEFAULT_DEMO, DEMOS, build_pipeline, list_demos, main, run_demo


class TestDemos:
    """Tests for the built-in demo expressions."""

    def test_scenarios_present(self):
        for letter in "abcde":
            assert f"scenario-{letter}" in DEMOS

    def test_default_demo_exists(self):
        assert DEFAULT_DEMO in DEMOS

    def test_demos_built_fresh(self):
        """Simplifying a demo does not affect the next run."""
        assert DEMOS["halve"]() is not DEMOS["halve"]()

    def test_list_demos(self):
        listing = list_demos()
        assert listing.startswith("Available demos:")
        assert "scenario-d" in listing
        assert "(x - y)" in listing

    @pytest.mark.parametrize("name", sorted(DEMOS))
    def test_every_demo_runs(self, name, capsys):
        assert run_demo(name, Simplifier()) == 0
        out = capsys.readouterr().out
        assert "Before simplify:" in out
        assert "After simplify:" in out


class TestBuildPipeline:
    """Tests for turning presets and flags into simplifiers."""

    def test_default(self):
        pipeline = build_pipeline([])
        assert isinstance(pipeline, Simplifier)
        assert pipeline.options == SimplifyOptions()

    def test_single_preset(self):
        pipeline = build_pipeline(["integers"])
        assert pipeline.options == SimplifyOptions.integers()

    def test_several_presets(self):
        pipeline = build_pipeline(["expand", "integers"])
        assert isinstance(pipeline, SequencedSimplifier)
        options = [phase.options for phase in pipeline]
        assert options == [SimplifyOptions.expanding(), SimplifyOptions.integers()]

    def test_flags_layer_on_presets(self):
        pipeline = build_pipeline(["integers"], expand=True, max_passes=50)
        assert pipeline.options == SimplifyOptions(expand=True, target_integers=True, max_passes=50)

    def test_unknown_preset(self):
        with pytest.raises(KeyError):
            build_pipeline(["fastest"])

    def test_invalid_max_passes(self):
        with pytest.raises(ValueError):
            build_pipeline([], max_passes=0)


class TestRunDemo:
    """Tests for run_demo output."""

    def test_before_and_after(self, capsys):
        assert run_demo("scenario-d", Simplifier()) == 0
        out = capsys.readouterr().out
        assert out == "Before simplify: (x - y)\nAfter simplify: (x + (y * -1))\n"

    def test_with_trace(self, capsys):
        run_demo("scenario-b", Simplifier(), trace=True)
        out = capsys.readouterr().out
        assert "Initial: (x * 0)" in out
        assert "After simplify: 0" in out

    def test_trace_style(self, capsys):
        run_demo("scenario-d", Simplifier(), trace=True, trace_style="passes")
        assert "flatten#1" in capsys.readouterr().out

    def test_convergence_failure(self, capsys):
        """Running out of passes is an error, not a result."""
        code = run_demo("scenario-d", Simplifier(SimplifyOptions(max_passes=1)))
        assert code == 1
        captured = capsys.readouterr()
        assert "Error: Simplification did not converge" in captured.err
        assert "After simplify" not in captured.out


class TestMain:
    """Tests for main() argument handling."""

    def test_runs_demo(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["scenario-a"])
        assert info.value.code == 0
        assert "After simplify: 2" in capsys.readouterr().out

    def test_default_demo(self, capsys):
        with pytest.raises(SystemExit):
            main([])
        assert "After simplify: ((x + (1/2)) * (1/2))" in capsys.readouterr().out

    def test_list(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--list"])
        assert info.value.code == 0
        assert "scenario-c" in capsys.readouterr().out

    def test_unknown_demo(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["nope"])
        assert info.value.code == 1
        assert "Unknown demo: nope" in capsys.readouterr().err

    def test_bad_max_passes(self, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--max-passes", "0", "scenario-a"])
        assert info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_unknown_preset_rejected_by_parser(self, capsys):
        """Preset names are checked by argparse before build_pipeline runs."""
        with pytest.raises(SystemExit) as info:
            main(["-p", "fastest", "scenario-a"])
        assert info.value.code == 2
        assert "invalid choice" in capsys.readouterr().err

    def test_presets_in_sequence(self, capsys):
        with pytest.raises(SystemExit):
            main(["halve", "-p", "expand", "-p", "integers"])
        assert "After simplify: ((x / 2) + (1/4))" in capsys.readouterr().out


class TestCLIIntegration:
    """Integration tests using subprocess."""

    def run(self, *args):
        return subprocess.run(
            [sys.executable, "-m", "reducto.cli", *args],
            capture_output=True, text=True
        )

    def test_help_flag(self):
        """--help flag works."""
        result = self.run("--help")
        assert result.returncode == 0
        assert "REDUCTO" in result.stdout

    def test_version_flag(self):
        """--version flag works."""
        result = self.run("--version")
        assert result.returncode == 0
        assert "0.1.0" in result.stdout

    def test_demo(self):
        result = self.run("scenario-d")
        assert result.returncode == 0
        assert "After simplify: (x + (y * -1))" in result.stdout

    def test_expand_then_integers(self):
        result = self.run("halve", "-p", "expand", "-p", "integers")
        assert result.returncode == 0
        assert "Before simplify: ((x + (1/2)) / 2)" in result.stdout
        assert "After simplify: ((x / 2) + (1/4))" in result.stdout

    def test_compact_trace(self):
        result = self.run("scenario-a", "-t", "--trace-style", "compact")
        assert result.returncode == 0
        assert "--[" in result.stdout

    def test_unknown_demo(self):
        result = self.run("missing")
        assert result.returncode == 1
        assert "Unknown demo" in result.stderr

    def test_bad_preset(self):
        """argparse rejects unknown presets."""
        result = self.run("-p", "fastest")
        assert result.returncode == 2

    def test_verbose_logs_passes(self):
        result = self.run("scenario-d", "-v")
        assert result.returncode == 0
        assert "pass 1" in result.stderr
