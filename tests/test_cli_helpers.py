import argparse
import webbrowser
from pathlib import Path

from cli import _write_report_file, write_output, build_parser


def test_write_report_file_creates_file(tmp_path):
    path = str(tmp_path / 'nested' / 'out_report.md')
    content = '# hello world'
    _write_report_file(path, content, open_html=False)
    p = Path(path)
    assert p.exists()
    assert p.read_text(encoding='utf-8') == content


def test_write_report_file_opens_html(monkeypatch, tmp_path):
    # monkeypatch webbrowser.open to capture calls and avoid launching a real browser
    called = {}

    def fake_open(url):
        called['url'] = url
        return True

    monkeypatch.setattr(webbrowser, 'open', fake_open)

    path = str(tmp_path / 'out_report2.html')
    _write_report_file(path, '<html><body>ok</body></html>', open_html=True)
    assert '<html' in Path(path).read_text(encoding='utf-8')
    assert called['url'].startswith('file://')


def test_write_output_text_goes_to_stdout(capsys):
    args = argparse.Namespace(out_file='', open=False)
    write_output('text', 'Release notes: 0', args)
    assert 'Release notes: 0' in capsys.readouterr().out


def test_write_output_default_name(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    args = argparse.Namespace(out_file='', open=False)
    write_output('markdown', '# report', args)
    written = list(tmp_path.glob('status_report_*.md'))
    assert len(written) == 1


def test_parser_defaults():
    args = build_parser().parse_args(['status', '--project', 'docs'])
    assert args.command == 'status'
    assert args.output == 'html'
    assert args.log_level == 'WARNING'


def test_write_output_htm_writes_html_file(tmp_path, monkeypatch):
    opened = []
    monkeypatch.setattr(webbrowser, 'open', lambda url: opened.append(url) or True)
    path = tmp_path / 'report.htm'
    args = argparse.Namespace(out_file=str(path), open=True)
    write_output('htm', '<html></html>', args)
    assert path.read_text(encoding='utf-8') == '<html></html>'
    assert len(opened) == 1
