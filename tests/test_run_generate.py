"""Tests for the CLI entrypoint and the output-writing driver."""

import json
import os

import pandas as pd
import pytest

from galaxygen import GalaxyConfig, GalaxyConfigError, GalaxyGenerator
from run_generate import build_parser, config_from_args, main


class TestParser:
    """Test argument parsing."""

    def test_defaults_match_config(self):
        args = build_parser().parse_args([])
        cfg = config_from_args(args)
        assert cfg == GalaxyConfig()

    def test_overrides(self):
        args = build_parser().parse_args(
            ["--max_stars", "12", "--galaxy_radius", "500", "--no_gexf"]
        )
        cfg = config_from_args(args)
        assert cfg.max_stars == 12
        assert cfg.galaxy_radius == 500.0
        assert cfg.write_gexf is False


class TestMain:
    """Test end-to-end CLI runs."""

    def test_writes_outputs(self, tmp_path, capsys):
        out = tmp_path / "run"
        assert main(["--out_dir", str(out), "--no_gexf", "--seed", "3"]) == 0

        stars = pd.read_csv(out / "stars.csv")
        edges = pd.read_csv(out / "edges.csv")
        assert list(stars.columns) == ["id", "constellation", "index", "x", "y"]
        assert list(edges.columns) == ["source", "target", "length", "kind"]
        assert len(stars) > 0

        with open(out / "params.json") as f:
            params = json.load(f)
        assert params["galaxy_radius"] == 300.0
        assert params["seed"] == 3
        assert not os.path.exists(out / "graph.gexf")

        printed = capsys.readouterr().out
        assert "ACCEPTANCE TESTS" in printed
        assert "Regeneration took" in printed

    def test_invalid_config_exits(self, tmp_path):
        out = tmp_path / "never"
        with pytest.raises(SystemExit) as exc:
            main(["--out_dir", str(out), "--min_stars", "9", "--max_stars", "2"])
        assert exc.value.code == 2
        assert not out.exists()


class TestGalaxyGenerator:
    """Test the seeded driver."""

    def test_same_seed_same_output(self, tmp_path):
        cfg = GalaxyConfig(seed=11, out_dir=str(tmp_path), write_gexf=False)
        s1, e1 = GalaxyGenerator(cfg).run()
        s2, e2 = GalaxyGenerator(cfg).run()
        assert s1.equals(s2)
        assert e1.equals(e2)

    def test_regenerate_gives_new_layout(self):
        gen = GalaxyGenerator(GalaxyConfig(seed=11, write_gexf=False))
        s1, _ = gen.regenerate().to_frames()
        s2, _ = gen.regenerate().to_frames()
        assert not s1.equals(s2)

    def test_invalid_config_writes_nothing(self, tmp_path):
        out = tmp_path / "never"
        cfg = GalaxyConfig(min_stars=9, max_stars=2, out_dir=str(out))
        with pytest.raises(GalaxyConfigError):
            GalaxyGenerator(cfg).run()
        assert not out.exists()

    def test_gexf_export(self, tmp_path):
        pytest.importorskip("networkx")
        cfg = GalaxyConfig(seed=2, out_dir=str(tmp_path), write_gexf=True)
        GalaxyGenerator(cfg).run()
        assert os.path.exists(tmp_path / "graph.gexf")
