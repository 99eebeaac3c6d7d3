import orjson
import pytest

from swayless.cli import build_parser, main


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "settings.json"
    path.write_bytes(orjson.dumps({"socket_path": str(tmp_path / "missing.sock")}))
    return str(path)


def test_parser_knows_every_verb():
    parser = build_parser()
    assert parser.parse_args(["bring-tag-here", "2"]).tag == "2"
    assert parser.parse_args(["alt-tab"]).command == "alt-tab"
    with pytest.raises(SystemExit):
        parser.parse_args(["focus-tag"])


def test_sending_without_daemon_fails(config, capsys):
    assert main(["--config", config, "focus-tag", "2"]) == 1
    assert "swayless init" in capsys.readouterr().err


def test_empty_tag_is_rejected(config):
    assert main(["--config", config, "focus-tag", ""]) == 2


def test_bad_config(tmp_path):
    assert main(["--config", str(tmp_path / "nope.json"), "alt-tab"]) == 1
