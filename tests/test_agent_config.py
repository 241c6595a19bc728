from db_agent.core.utils.agent_config import load_agent_yaml


def test_missing_file_returns_none(tmp_path):
    assert load_agent_yaml(tmp_path) is None


def test_rules_and_tables_are_parsed(tmp_path):
    (tmp_path / "db-agent.yaml").write_text(
        """
files:
  queue: src/components/Queue.tsx
rules:
  - keywords: [queue, "up next"]
    files: [main_page, queue]
  - keywords: ignored-without-files
default_files: main_page
interactive_commands:
  - prisma migrate dev
""",
        encoding="utf-8",
    )

    config = load_agent_yaml(tmp_path)

    assert config is not None
    assert config.files == {"queue": "src/components/Queue.tsx"}
    assert config.rules == [(("queue", "up next"), ("main_page", "queue"))]
    assert config.default_files == ("main_page",)
    assert config.interactive_commands == ("prisma migrate dev",)


def test_invalid_yaml_is_ignored(tmp_path):
    (tmp_path / "db-agent.yaml").write_text("files: [unclosed\n", encoding="utf-8")

    assert load_agent_yaml(tmp_path) is None


def test_non_mapping_yaml_is_ignored(tmp_path):
    (tmp_path / "db-agent.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    assert load_agent_yaml(tmp_path) is None
