from db_agent.providers.llm import StreamHooks, consume_stream
from db_agent.providers.llm.base import PartKind, StreamChunk, StreamPart


def _chunk(*parts):
    return StreamChunk(parts=tuple(StreamPart(kind, text) for kind, text in parts))


def test_consume_stream_splits_buffers_and_skips_empty_parts():
    thoughts, answers = [], []
    hooks = StreamHooks(on_thought=thoughts.append, on_answer=answers.append)
    chunks = [
        _chunk((PartKind.THOUGHT, "Let me "), (PartKind.ANSWER, "")),
        _chunk((PartKind.THOUGHT, "think."), (PartKind.ANSWER, '{"plan":')),
        _chunk((PartKind.ANSWER, " []}")),
    ]

    result = consume_stream(chunks, hooks)

    assert result.thoughts == "Let me think."
    assert result.answer == '{"plan": []}'
    assert thoughts == ["Let me ", "think."]
    assert answers == ['{"plan":', " []}"]


def test_consume_stream_without_hooks():
    result = consume_stream(iter([_chunk((PartKind.ANSWER, "only"))]))

    assert result.answer == "only"
    assert result.thoughts == ""
