"""Tests for the GrADS regridder (GrADS itself is never executed)."""

import subprocess
from datetime import date

import pytest

from climdivs.contracts import ConfigError, RegridError
from climdivs.regrid import GradsRegridder, grads_time
from climdivs.schemas import GridGeometry

from tests.helpers.fake_inputs import grid_bytes

pytestmark = pytest.mark.unit


GEOMETRY = GridGeometry(resolution=0.5, lon_min=-100, lon_max=-99, lat_min=35, lat_max=35.5)
RUN_DATE = date(2018, 9, 19)


@pytest.fixture
def regridder(make_config):
    return GradsRegridder(make_config(GRID_GEOMETRY=GEOMETRY.model_dump()))


@pytest.fixture
def ctl_file(temp_dir):
    ctl = temp_dir / "tmax.ctl"
    ctl.write_text("dset ^tmax.bin\n")
    return ctl


def patch_run(monkeypatch, nbytes=None, returncode=0, exc=None):
    def run(cmd, cwd=None, **kwargs):
        if exc is not None:
            raise exc
        if nbytes is not None:
            (cwd / "regridded.bin").write_bytes(b"\0" * nbytes)
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr="boom")
    monkeypatch.setattr("climdivs.regrid.grads.subprocess.run", run)


def test_grads_time():
    assert grads_time(RUN_DATE) == "00Z19SEP2018"
    assert grads_time(date(2020, 1, 2)) == "00Z02JAN2020"


def test_geometry_required(internal_config):
    with pytest.raises(ConfigError, match="geometry"):
        GradsRegridder(internal_config)


def test_build_script(regridder, temp_dir):
    script = regridder.build_script("/data/tmax.ctl", RUN_DATE, temp_dir / "out.bin")
    assert "'open /data/tmax.ctl'" in script
    assert "'set time 00Z19SEP2018'" in script
    assert "'set undef -9999.0'" in script
    assert f"'set fwrite -le -st {temp_dir / 'out.bin'}'" in script
    # 3 x 2 target grid at 0.5 degrees
    assert "re('var', 3, linear, -100.0, 0.5, 2, linear, 35.0, 0.5, ba)" in script
    assert script.rstrip().endswith("'quit'")


def test_build_script_finds_first_variable_after_count_line(regridder, temp_dir):
    # GrADS 2.x 'q file': the variable list follows "Number of Variables = N",
    # whose position depends on the descriptor
    script = regridder.build_script("/data/tmax.ctl", RUN_DATE, temp_dir / "out.bin")
    assert "'q file'" in script
    assert "if (subwrd(line, 1) = 'Number' & subwrd(line, 3) = 'Variables')" in script
    assert "var = subwrd(sublin(result, i + 1), 1)" in script
    assert "sublin(result, 8)" not in script
    assert script.index("'q file'") < script.index("'d re('var'")


def test_regrid_writes_expected_grid(regridder, ctl_file, temp_dir, monkeypatch):
    patch_run(monkeypatch, nbytes=len(grid_bytes([0.0] * GEOMETRY.size)))
    out = regridder.regrid(ctl_file, RUN_DATE, temp_dir)
    assert out == temp_dir / "regridded.bin"
    assert (temp_dir / "regrid.gs").exists()


def test_missing_descriptor(regridder, temp_dir):
    with pytest.raises(RegridError, match="descriptor not found"):
        regridder.regrid(temp_dir / "nope.ctl", RUN_DATE, temp_dir)


def test_missing_executable(regridder, ctl_file, temp_dir, monkeypatch):
    patch_run(monkeypatch, exc=FileNotFoundError("grads"))
    with pytest.raises(RegridError, match="executable not found"):
        regridder.regrid(ctl_file, RUN_DATE, temp_dir)


def test_timeout(regridder, ctl_file, temp_dir, monkeypatch):
    patch_run(monkeypatch, exc=subprocess.TimeoutExpired("grads", 600))
    with pytest.raises(RegridError, match="did not finish"):
        regridder.regrid(ctl_file, RUN_DATE, temp_dir)


def test_nonzero_exit(regridder, ctl_file, temp_dir, monkeypatch):
    patch_run(monkeypatch, returncode=2)
    with pytest.raises(RegridError, match="status 2: boom"):
        regridder.regrid(ctl_file, RUN_DATE, temp_dir)


def test_no_output(regridder, ctl_file, temp_dir, monkeypatch):
    patch_run(monkeypatch)
    with pytest.raises(RegridError, match="wrote no grid"):
        regridder.regrid(ctl_file, RUN_DATE, temp_dir)


def test_wrong_output_size(regridder, ctl_file, temp_dir, monkeypatch):
    patch_run(monkeypatch, nbytes=10)
    with pytest.raises(RegridError, match="has 10 bytes, expected 24"):
        regridder.regrid(ctl_file, RUN_DATE, temp_dir)
