import json
import logging
import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch, tmp_path):
    """Keep host configuration and variables loaded from .env files out of each test."""
    names = [name for name in os.environ if name.startswith("DB_AGENT_")]
    names += ["GEMINI_API_KEY", "DATABASE_URL"]
    for name in names:
        # setenv first so teardown also removes values added later by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr("db_agent.core.utils.config.DEFAULT_CONFIG_PATHS", ())
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def write_project(root: Path, *, dependencies=None, dev_dependencies=None, files=None) -> Path:
    manifest = {
        "name": "music-app",
        "dependencies": {"next": "14.2.3", "react": "18.3.1", **(dependencies or {})},
        "devDependencies": dict(dev_dependencies or {}),
    }
    root.mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    page = root / "src" / "app" / "page.tsx"
    page.parent.mkdir(parents=True, exist_ok=True)
    page.write_text("export default function Home() { return <main />; }\n", encoding="utf-8")
    for rel_path, content in (files or {}).items():
        target = root / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def nextjs_project(tmp_path: Path) -> Path:
    return write_project(
        tmp_path / "app",
        dependencies={"drizzle-orm": "0.33.0", "left-pad": "1.3.0"},
        dev_dependencies={"drizzle-kit": "0.24.0", "@types/node": "20.0.0"},
    )
