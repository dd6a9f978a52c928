import re
from pathlib import Path

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def test_directly_imported_libraries_are_declared():
    text = PYPROJECT.read_text(encoding="utf-8")
    declared = re.findall(r'^\s+"([A-Za-z0-9_.-]+)', text, re.MULTILINE)

    for name in ("flask", "flask-cors", "flask-socketio", "werkzeug", "python-dotenv", "openai"):
        assert name in declared


def test_readme_points_at_a_real_file():
    match = re.search(r'^readme\s*=\s*"([^"]+)"', PYPROJECT.read_text(encoding="utf-8"), re.MULTILINE)

    assert match is None or (PYPROJECT.parent / match.group(1)).is_file()
