import json

from click.testing import CliRunner
from PIL import Image

from main import main


def test_spine_command():
    result = CliRunner().invoke(main, ["spine", "--pages", "200", "--paper", "white", "--spine-profile", "kdp"])
    assert result.exit_code == 0, result.output
    assert "11.699" in result.output


def test_spine_command_rejects_unknown_profile():
    result = CliRunner().invoke(main, ["spine", "--spine-profile", "ingram"])
    assert result.exit_code != 0


def test_render_preview(tmp_path):
    out = tmp_path / "preview.png"
    design = tmp_path / "design.json"
    design.write_text(json.dumps({"backCoverBackgroundType": "pattern", "backCoverPatternType": "dots"}))
    result = CliRunner().invoke(main, [
        "render", "--title", "Tides", "--author", "A. Author", "--pages", "120",
        "--design", str(design), "--preview", "--guides", "--out", str(out),
    ])
    assert result.exit_code == 0, result.output
    with Image.open(out) as img:
        assert img.height == 666


def test_render_rejects_bad_design_file(tmp_path):
    design = tmp_path / "design.json"
    design.write_text("{not json")
    result = CliRunner().invoke(main, ["render", "--design", str(design), "--out", str(tmp_path / "x.png")])
    assert result.exit_code != 0
    assert "Cannot read design file" in result.output


def test_pdf_then_validate(tmp_path):
    out = tmp_path / "cover.pdf"
    runner = CliRunner()
    result = runner.invoke(main, ["pdf", "--title", "Tides", "--pages", "150", "--paper", "cream",
                                  "--dpi", "72", "--spine-profile", "kdp", "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists()

    result = runner.invoke(main, ["validate", str(out), "--pages", "150", "--paper", "cream", "--spine-profile", "kdp"])
    assert result.exit_code == 0, result.output
    assert "Expected size" in result.output

    result = runner.invoke(main, ["validate", str(out), "--pages", "400", "--paper", "cream", "--spine-profile", "kdp"])
    assert result.exit_code == 1
