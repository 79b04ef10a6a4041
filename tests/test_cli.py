"""Tests for the tanaclip command line (python -m tanaclip)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from tanaclip.__main__ import main
from tanaclip.items import CopyResult
from tanaclip.query import FetchError

FIXTURES_DIR = Path(__file__).parent / "fixtures"
MINIMAL = str(FIXTURES_DIR / "minimal_page.html")


@pytest.fixture
def config(tmp_path: Path) -> str:
    return str(tmp_path / "options.yaml")


class TestMain:
    def test_html_file_selection_only(self, capsys, config):
        code = main([
            "--html", MINIMAL, "--page-url", "https://x.test/p",
            "--selector", "#para", "--selection-only", "--config", config,
        ])
        assert code == 0
        assert capsys.readouterr().out == (
            "- [Plain Page](https://x.test/p) #webclip\n"
            "  - Just a paragraph of text.\n"
        )

    def test_tag_and_keep_empty(self, capsys, config):
        code = main(["--html", MINIMAL, "--tag", "later", "--keep-empty", "--config", config])
        assert code == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "- Plain Page #later"
        assert "  - Publication:: " in out
        assert "  - Date:: [[date:]]" in out

    def test_no_tag(self, capsys, config):
        main(["--html", MINIMAL, "--no-tag", "--selection-only", "--config", config])
        assert capsys.readouterr().out == "- Plain Page\n"

    def test_saved_options_apply(self, capsys, tmp_path):
        path = tmp_path / "opts.yaml"
        path.write_text(
            yaml.safe_dump({"tanaOptions": {"includeMetadata": False, "defaultTag": "saved"}}),
            encoding="utf-8",
        )
        main(["--html", MINIMAL, "--page-url", "https://x.test/p", "--config", str(path)])
        assert capsys.readouterr().out == "- [Plain Page](https://x.test/p) #saved\n"

    def test_with_metadata_overrides_saved_option(self, capsys, tmp_path):
        path = tmp_path / "opts.yaml"
        path.write_text(yaml.safe_dump({"tanaOptions": {"includeMetadata": False}}), encoding="utf-8")
        main([
            "--html", MINIMAL, "--page-url", "https://x.test/p",
            "--with-metadata", "--config", str(path),
        ])
        assert "  - Source:: [Plain Page](https://x.test/p)" in capsys.readouterr().out
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["tanaOptions"] == {
            "includeMetadata": False,
        }

    def test_selection_html_file(self, capsys, tmp_path, config):
        frag = tmp_path / "sel.html"
        frag.write_text("<h2>Picked</h2><p>Some text</p>", encoding="utf-8")
        main(["--html", MINIMAL, "--selection-html", str(frag), "--selection-only",
              "--config", config])
        assert capsys.readouterr().out == "- **Picked** #webclip\n  - Some text\n"

    def test_url_fetch(self, capsys, config):
        html = (FIXTURES_DIR / "minimal_page.html").read_text(encoding="utf-8")
        with patch("tanaclip.__main__.fetch_html", return_value=html) as mock_fetch:
            code = main(["--url", "https://x.test/p", "--selection-only", "--config", config])
        assert code == 0
        mock_fetch.assert_called_once_with("https://x.test/p", timeout=30)
        assert capsys.readouterr().out == "- [Plain Page](https://x.test/p) #webclip\n"

    def test_fetch_error_exit_code(self, capsys, config):
        with patch("tanaclip.__main__.fetch_html", side_effect=FetchError("HTTP 404", url="u")):
            code = main(["--url", "https://x.test/missing", "--config", config])
        assert code == 1
        assert "ERROR: HTTP 404" in capsys.readouterr().err

    def test_missing_file_exit_code(self, capsys, tmp_path, config):
        code = main(["--html", str(tmp_path / "nope.html"), "--config", config])
        assert code == 1
        assert "Could not read input" in capsys.readouterr().err

    def test_requires_a_source(self):
        with pytest.raises(SystemExit) as info:
            main([])
        assert info.value.code == 2

    def test_copy_success_notifies(self, capsys, config):
        with patch("tanaclip.__main__.copy_to_clipboard",
                   return_value=CopyResult(ok=True, method="pbcopy")) as mock_copy:
            code = main(["--html", MINIMAL, "--selection-only", "--copy", "--config", config])
        assert code == 0
        mock_copy.assert_called_once_with("- Plain Page #webclip")
        assert "Copied to Tana format" in capsys.readouterr().err

    def test_copy_failure(self, capsys, config):
        with patch("tanaclip.__main__.copy_to_clipboard",
                   return_value=CopyResult(ok=False, err="nope")):
            code = main(["--html", MINIMAL, "--copy", "--config", config])
        assert code == 1
        assert "Failed to copy to clipboard" in capsys.readouterr().err

    def test_quiet_copy(self, capsys, config):
        with patch("tanaclip.__main__.copy_to_clipboard",
                   return_value=CopyResult(ok=True, method="xsel")):
            main(["--html", MINIMAL, "--copy", "--quiet", "--config", config])
        assert "Copied to Tana format" not in capsys.readouterr().err

    def test_non_utf8_file(self, capsys, tmp_path, config):
        page = tmp_path / "latin1.html"
        page.write_bytes("<title>Café notes</title><p id='p'>Crème brûlée</p>".encode("latin-1"))
        code = main(["--html", str(page), "--selector", "#p", "--selection-only",
                     "--config", config])
        assert code == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "- Caf� notes #webclip"
        assert out[1].startswith("  - Cr�me")

    def test_undecodable_stdin(self, capsys, monkeypatch, config):
        class _BadStdin:
            def read(self):
                raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1, "invalid continuation byte")

        monkeypatch.setattr("sys.stdin", _BadStdin())
        code = main(["--html", "-", "--config", config])
        assert code == 1
        assert "Could not read input" in capsys.readouterr().err
