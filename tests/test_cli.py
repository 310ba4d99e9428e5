import render

BASE_ARGS = ["--x-res", "8", "--y-res", "6", "--max-iterations", "40", "--device", "/CPU:0"]


def _digest(output):
    for line in output.splitlines():
        if line.startswith("sha256: "):
            return line.split(": ", 1)[1]
    return None


def test_parser_defaults():
    opt = render.build_parser().parse_args([])
    assert opt.x_res == 512
    assert opt.scale == 1.0
    assert opt.squared_escape_radius == 4000.0
    assert opt.evaluator == "tensorflow"
    assert opt.rows_per_band is None


def test_main_reports_render(capsys):
    assert render.main(BASE_ARGS) == 0
    out = capsys.readouterr().out
    assert "resolution: 8x6" in out
    assert "hue range: [0, " in out
    assert len(_digest(out)) == 64


def test_banding_does_not_change_digest(capsys):
    assert render.main(BASE_ARGS) == 0
    first = _digest(capsys.readouterr().out)
    assert render.main([*BASE_ARGS, "--rows-per-band", "2"]) == 0
    second = _digest(capsys.readouterr().out)
    assert first == second


def test_main_rejects_invalid_view(capsys):
    assert render.main([*BASE_ARGS, "--scale", "0.5"]) == 1
    assert "render failed" in capsys.readouterr().err
