import datetime as dt
import io
import json
import sys
from pathlib import Path

import pytest

from chat_markdown.cli import main, resolve_save_path, sanitize_filename

CHATGPT_PAGE = (
    '<html><head><title>Sorting help</title></head><body>'
    '<div data-message-author-role="user"><div class="markdown"><p>How do I sort?</p></div></div>'
    '<div data-message-author-role="assistant"><div class="markdown"><p>Use:</p>'
    '<pre><code class="language-python">sorted(xs)</code></pre></div></div>'
    '</body></html>'
)


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    return tmp_path


def write(tmp_path, markup, name="page.html"):
    path = tmp_path / name
    path.write_text(markup, encoding="utf-8")
    return str(path)


def test_prints_markdown(tmp_path, capsys):
    assert main([write(tmp_path, "<ul><li>A</li><li>B</li></ul>")]) == 0
    assert capsys.readouterr().out == "- A\n- B\n"


def test_messages_are_separated(tmp_path, capsys):
    assert main([write(tmp_path, CHATGPT_PAGE)]) == 0
    assert capsys.readouterr().out == "How do I sort?\n\n---\n\nUse:\n\n```python\nsorted(xs)\n```\n"


def test_items_as_json(tmp_path, capsys):
    assert main([write(tmp_path, CHATGPT_PAGE), "--items"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data[0] == [{"content": "How do I sort?", "type": "text"}]
    assert data[1][1] == {"language": "python", "content": "sorted(xs)", "type": "code_block"}


def test_no_content(tmp_path, capsys):
    assert main([write(tmp_path, "<div> </div>")]) == 1
    assert "No content found." in capsys.readouterr().err


def test_unreadable_input(tmp_path, capsys):
    assert main([str(tmp_path / "missing.html")]) == 2
    assert "Cannot read" in capsys.readouterr().err


def test_unknown_profile(tmp_path, capsys):
    assert main([write(tmp_path, "<p>x</p>"), "--profile", "nope"]) == 2
    assert "Unknown profile" in capsys.readouterr().err


def test_explicit_profile(tmp_path, capsys):
    markup = '<div class="not-prose"><span class="font-mono text-xs">bash</span><pre><code>ls</code></pre></div>'
    assert main([write(tmp_path, markup), "--profile", "grok"]) == 0
    assert capsys.readouterr().out == "```bash\nls\n```\n"


def test_output_file(tmp_path, capsys):
    out = tmp_path / "nested" / "out.md"
    assert main([write(tmp_path, "<h1>Hi</h1>"), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "# Hi\n"
    assert "Saved to" in capsys.readouterr().err


def test_save_uses_configured_template(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "output:\n  dir: 'logs/{year}'\n  filename: '{profile}_{title}.md'\n", encoding="utf-8"
    )
    assert main([write(tmp_path, CHATGPT_PAGE), "--save"]) == 0
    year = dt.datetime.now().strftime("%Y")
    saved = tmp_path / "logs" / year / "chatgpt_Sorting help.md"
    assert saved.read_text(encoding="utf-8").startswith("How do I sort?")


def test_stdin_and_cf_html(monkeypatch, capsys):
    raw = b"Version:0.9\r\nStartFragment:00000040\r\n<!--StartFragment--><p>from <b>clipboard</b></p><!--EndFragment-->"
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(raw)))
    assert main(["-"]) == 0
    assert capsys.readouterr().out == "from **clipboard**\n"


def test_base_url_and_max_depth_flags(tmp_path, capsys):
    markup = '<p><img src="/a.png" alt="a"></p>'
    assert main([write(tmp_path, markup), "--base-url", "https://example.com", "--max-depth", "5"]) == 0
    assert capsys.readouterr().out == "![a](https://example.com/a.png)\n"


def test_resolve_save_path():
    config = {
        "output": {"dir": "out/{year}-{month}", "filename": "{date}_{time}_{profile}_{title}.md"},
        "time_format": "%H%M", "year_format": "%Y", "month_format": "%m", "date_format": "%Y%m%d",
    }
    path = resolve_save_path(config, "claude", "What is 2/3?", now=dt.datetime(2024, 5, 6, 7, 8))
    assert path == Path("out/2024-05") / "20240506_0708_claude_What is 2_3_.md"


def test_sanitize_filename():
    assert sanitize_filename('a<b>:"c"/d\\e|f?g*#`') == "a_b___c__d_e_f_g__"
    assert len(sanitize_filename("x" * 200)) == 80
