"""Unit tests for the streaming chat client against a local HTTP server."""

import asyncio
import json
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from hanasu.errors import ConfigurationError, UpstreamError
from hanasu.llm import StreamingChatClient, get_provider
from hanasu.models.events import Delta, Done, Failed


def streaming_handler(chunks, seen_requests):
    async def handler(request):
        seen_requests.append({
            "json": await request.json(),
            "authorization": request.headers.get("Authorization"),
        })
        response = web.StreamResponse(status=200, headers={"Content-Type": "text/event-stream"})
        await response.prepare(request)
        for chunk in chunks:
            await response.write(chunk)
        await response.write_eof()
        return response
    return handler


async def run_with_server(handler, scenario, path="/v1/chat/completions"):
    app = web.Application()
    app.router.add_post(path, handler)
    server = TestServer(app)
    await server.start_server()
    try:
        return await scenario(str(server.make_url("/v1")))
    finally:
        await server.close()


async def collect(stream):
    return [event async for event in stream]


@pytest.mark.unit
class TestStreamChat:

    def test_deltas_then_done(self, sse_body):
        seen = []

        async def scenario(base_url):
            client = StreamingChatClient(api_key="test-key", base_url=base_url)
            return await collect(client.stream_chat("system", "prompt", 0.1))

        events = asyncio.run(run_with_server(
            streaming_handler([sse_body(["こん", "にちは"])], seen), scenario))

        assert events == [Delta("こん"), Delta("にちは"), Done()]
        assert seen[0]["authorization"] == "Bearer test-key"
        assert seen[0]["json"]["stream"] is True
        assert seen[0]["json"]["model"] == "gpt-4o-mini"

    def test_records_split_across_writes(self, sse_body):
        body = sse_body(["Hello", " world"])
        chunks = [body[i:i + 7] for i in range(0, len(body), 7)]

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            return await collect(client.stream_chat("s", "p"))

        events = asyncio.run(run_with_server(streaming_handler(chunks, []), scenario))
        assert events == [Delta("Hello"), Delta(" world"), Done()]

    def test_malformed_chunk_is_skipped(self, sse_body):
        chunks = [b"data: {not json\n\n", b'data: ["list"]\n\n', sse_body(["ok"])]

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            return await collect(client.stream_chat("s", "p"))

        events = asyncio.run(run_with_server(streaming_handler(chunks, []), scenario))
        assert events == [Delta("ok"), Done()]

    def test_stream_without_done_marker_completes(self, sse_body):
        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            return await collect(client.stream_chat("s", "p"))

        events = asyncio.run(run_with_server(
            streaming_handler([sse_body(["a"], done=False)], []), scenario))
        assert events == [Delta("a"), Done()]

    def test_http_error_yields_failed(self):
        async def handler(request):
            return web.Response(status=500, text="boom")

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            return await collect(client.stream_chat("s", "p"))

        events = asyncio.run(run_with_server(handler, scenario))
        assert events == [Failed("HTTP 500: Internal Server Error")]

    def test_connection_error_yields_failed(self):
        async def scenario():
            client = StreamingChatClient(api_key="k", base_url="http://127.0.0.1:1/v1")
            return await collect(client.stream_chat("s", "p"))

        events = asyncio.run(scenario())
        assert len(events) == 1
        assert isinstance(events[0], Failed)
        assert events[0].reason.startswith("Network error")

    def test_japan_ai_records(self):
        records = [
            {"type": "status", "status": "thinking"},
            {"type": "delta", "delta": {"type": "text", "text": "質問"}},
            {"type": "delta", "delta": {"type": "text", "text": "です"}},
        ]
        body = "".join(f"data: {json.dumps(r, ensure_ascii=False)}\n\n" for r in records).encode("utf-8")
        seen = []

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", provider=get_provider("japan_ai"), base_url=base_url)
            return await collect(client.stream_chat("system", "prompt", 0.7))

        events = asyncio.run(run_with_server(
            streaming_handler([body], seen), scenario, path="/v1/chat/v2"))

        assert events == [Delta("質問"), Delta("です"), Done()]
        assert seen[0]["json"]["systemPrompt"] == "system"
        assert seen[0]["json"]["prompt"] == "prompt"

    def test_cancellation_does_not_produce_failed(self, sse_body):
        received = []

        async def main():
            release = asyncio.Event()

            async def handler(request):
                response = web.StreamResponse(status=200, headers={"Content-Type": "text/event-stream"})
                await response.prepare(request)
                await response.write(sse_body(["partial"], done=False))
                await release.wait()
                return response

            async def scenario(base_url):
                client = StreamingChatClient(api_key="k", base_url=base_url)
                first = asyncio.Event()

                async def consume():
                    async for event in client.stream_chat("s", "p"):
                        received.append(event)
                        first.set()

                task = asyncio.create_task(consume())
                await asyncio.wait_for(first.wait(), timeout=5)
                task.cancel()
                with pytest.raises(asyncio.CancelledError):
                    await task
                release.set()

            await run_with_server(handler, scenario)

        asyncio.run(main())
        assert received == [Delta("partial")]


@pytest.mark.unit
class TestComplete:

    def test_returns_stripped_message(self):
        seen = []

        async def handler(request):
            seen.append(await request.json())
            return web.json_response({"choices": [{"message": {"content": "  result  "}}]})

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            return await client.complete("s", "p", temperature=0.1)

        assert asyncio.run(run_with_server(handler, scenario)) == "result"
        assert seen[0]["stream"] is False

    def test_http_error_raises(self):
        async def handler(request):
            return web.Response(status=401, text="no")

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            with pytest.raises(UpstreamError) as excinfo:
                await client.complete("s", "p")
            return excinfo.value

        error = asyncio.run(run_with_server(handler, scenario))
        assert error.status == 401

    def test_empty_content_raises(self):
        async def handler(request):
            return web.json_response({"choices": [{"message": {"content": ""}}]})

        async def scenario(base_url):
            client = StreamingChatClient(api_key="k", base_url=base_url)
            with pytest.raises(UpstreamError):
                await client.complete("s", "p")

        asyncio.run(run_with_server(handler, scenario))


@pytest.mark.unit
def test_api_key_required():
    with pytest.raises(ConfigurationError):
        StreamingChatClient(api_key="")
