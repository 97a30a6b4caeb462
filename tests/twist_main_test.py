import pytest
from stl import mesh as stl_mesh

from twistcube.animation import SpiralState
from twistcube.twist_main import TwistMainRunner, main


def test_parser_defaults():
    runner = TwistMainRunner([])
    args = runner.args
    assert args.size == 100
    assert args.steps == 64
    assert args.clicks == 1
    assert args.frames is None
    assert args.stl is False
    assert args.output_base == 'twistcube'
    assert args.log_level == 'WARNING'


def test_one_click_grows_spiral(capsys):
    assert main(['--clicks', '1', '--steps', '8']) == 0
    out = capsys.readouterr().out
    assert "Click 1: {'_touched': '1'} -> 8 frames, 8 copies" in out


def test_two_clicks_unwind(capsys):
    assert main(['--clicks', '2', '--steps', '8']) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[-1] == "Click 2: {'_touched': '0'} -> 8 frames, 0 copies"


def test_size_option_rebuilds():
    runner = TwistMainRunner(['--size', '40', '--clicks', '0'])
    assert runner.run() == 0
    assert runner.session.size == 40
    assert runner.session.dattr['size'] == 40
    assert runner.session.definition.bounds.max_point.tolist() == pytest.approx([40, 40, 40])


def test_frames_cap_leaves_spiral_suspended():
    runner = TwistMainRunner(['--clicks', '1', '--frames', '5'])
    assert runner.run() == 0
    assert len(runner.session.copies) == 5
    assert runner.session.animator.state is SpiralState.GROWING


def test_stl_export(tmp_path, capsys):
    base = tmp_path / 'spiral'
    assert main(['--steps', '4', '--stl', '--output-base', str(base)]) == 0
    filename = f'{base}.stl'
    assert f'Exported STL: {filename}' in capsys.readouterr().out

    spiral = stl_mesh.Mesh.from_file(filename)
    assert len(spiral.v0) > 12


@pytest.mark.parametrize('argv', [['--size', '0'], ['--steps', 'x'], ['--log-level', 'LOUD']])
def test_bad_arguments(argv):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)
    assert excinfo.value.code == 2
