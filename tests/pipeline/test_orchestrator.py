"""Tests for PipelineOrchestrator: logging, work directory, regridding."""

import logging
import subprocess
from pathlib import Path

import pytest

from climdivs.contracts import ConfigError, RegridError, SizeMismatchError
from climdivs.pipeline.orchestrator import PipelineOrchestrator, setup_logging
from climdivs.schemas import GridGeometry

from tests.helpers.fake_inputs import geometry_map_text, grid_bytes, write_grid

pytestmark = pytest.mark.integration


GEOMETRY = GridGeometry(resolution=1.0, lon_min=-100, lon_max=-99, lat_min=35, lat_max=36)


@pytest.fixture
def ctl_config(make_config, temp_dir):
    """Config for a ctl-mode run on a 2 x 2 reference grid."""
    map_path = temp_dir / "geo_map.txt"
    map_path.write_text(geometry_map_text(GEOMETRY, [1, 1, 2, None]))
    ctl = temp_dir / "tmax.ctl"
    ctl.write_text("dset ^tmax.bin\n")

    def _make(**cli):
        cli_args = {"ctl": str(ctl), "date": "20180919", "output": str(temp_dir / "out.txt")}
        cli_args.update(cli)
        return make_config(
            cli=cli_args,
            DIVISION_MAP=str(map_path),
            GRID_GEOMETRY=GEOMETRY.model_dump(),
        )
    return _make


def fake_grads(values, returncode=0):
    """subprocess.run stand-in that writes the regridded grid into cwd."""
    calls = []

    def run(cmd, cwd=None, **kwargs):
        calls.append((cmd, Path(cwd)))
        if returncode == 0:
            (Path(cwd) / "regridded.bin").write_bytes(grid_bytes(values))
        return subprocess.CompletedProcess(cmd, returncode, stdout="ok", stderr="grads failed")

    run.calls = calls
    return run


def test_grid_mode_writes_report(run_config, pipeline_output_dirs, temp_dir):
    out = PipelineOrchestrator(run_config(), pipeline_output_dirs).run(configure_logging=False)
    assert out == temp_dir / "out.txt"
    assert out.read_text().splitlines()[4] == "5 15.00"


def test_logging_file_created(run_config, pipeline_output_dirs, restore_root_logging):
    config = run_config(cli={"date": "20180919"})
    PipelineOrchestrator(config, pipeline_output_dirs).run()
    log_path = pipeline_output_dirs["logs"] / "grid_to_climdivs_20180919.log"
    assert log_path.exists()
    assert "Wrote 344 division records" in log_path.read_text()


def test_output_required(make_config, example_map, example_grid, pipeline_output_dirs):
    config = make_config(cli={"grid": str(example_grid)}, DIVISION_MAP=str(example_map))
    with pytest.raises(ConfigError, match="No output file"):
        PipelineOrchestrator(config, pipeline_output_dirs).run(configure_logging=False)


def test_grid_source_required(make_config, example_map, temp_dir, pipeline_output_dirs):
    config = make_config(cli={"output": str(temp_dir / "o.txt")}, DIVISION_MAP=str(example_map))
    with pytest.raises(ConfigError, match="Exactly one"):
        PipelineOrchestrator(config, pipeline_output_dirs).run(configure_logging=False)


def test_size_mismatch_leaves_no_output(run_config, pipeline_output_dirs, temp_dir):
    short = write_grid(temp_dir / "short.bin", [1.0, 2.0])
    config = run_config(cli={"grid": str(short)})
    with pytest.raises(SizeMismatchError):
        PipelineOrchestrator(config, pipeline_output_dirs).run(configure_logging=False)
    assert not (temp_dir / "out.txt").exists()


def test_ctl_mode_regrids_then_processes(ctl_config, pipeline_output_dirs, temp_dir, monkeypatch):
    fake = fake_grads([2.0, 4.0, 9.0, -9999.0])
    monkeypatch.setattr("climdivs.regrid.grads.subprocess.run", fake)

    out = PipelineOrchestrator(ctl_config(), pipeline_output_dirs).run(configure_logging=False)

    lines = out.read_text().splitlines()
    assert lines[0] == "1 3.00"
    assert lines[1] == "2 9.00"
    cmd, cwd = fake.calls[0]
    assert cmd[:2] == ["grads", "-blc"]
    assert cwd.parent == pipeline_output_dirs["work"]
    # scoped work directory removed
    assert list(pipeline_output_dirs["work"].iterdir()) == []


def test_ctl_mode_cleans_work_dir_on_failure(ctl_config, pipeline_output_dirs, temp_dir, monkeypatch):
    monkeypatch.setattr("climdivs.regrid.grads.subprocess.run", fake_grads([], returncode=1))

    with pytest.raises(RegridError, match="status 1"):
        PipelineOrchestrator(ctl_config(), pipeline_output_dirs).run(configure_logging=False)

    assert list(pipeline_output_dirs["work"].iterdir()) == []
    assert not (temp_dir / "out.txt").exists()


def test_keep_work_files(ctl_config, make_config, pipeline_output_dirs, monkeypatch):
    monkeypatch.setattr("climdivs.regrid.grads.subprocess.run", fake_grads([1.0, 1.0, 1.0, 1.0]))
    config = ctl_config()
    config = config.model_copy(update={
        "regridder": config.regridder.model_copy(update={"keep_work_files": True})
    })

    PipelineOrchestrator(config, pipeline_output_dirs).run(configure_logging=False)

    kept = list(pipeline_output_dirs["work"].iterdir())
    assert len(kept) == 1
    assert (kept[0] / "regrid.gs").exists()


def test_ctl_mode_requires_geometry(make_config, temp_dir, example_map, pipeline_output_dirs):
    ctl = temp_dir / "tmax.ctl"
    ctl.write_text("dset ^tmax.bin\n")
    config = make_config(
        cli={"ctl": str(ctl), "date": "20180919", "output": str(temp_dir / "o.txt")},
        DIVISION_MAP=str(example_map),
    )
    with pytest.raises(ConfigError, match="geometry"):
        PipelineOrchestrator(config, pipeline_output_dirs).run(configure_logging=False)


def test_setup_logging_replaces_handlers(temp_dir, restore_root_logging):
    setup_logging("DEBUG", temp_dir / "logs" / "a.log")
    setup_logging("WARNING", temp_dir / "logs" / "b.log")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename.endswith("b.log")
