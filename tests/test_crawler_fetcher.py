from cleanchoice.services.crawl.fetcher import DEFAULT_USER_AGENT, PageFetcher

import httpx

import threading


def _client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler), headers={"User-Agent": DEFAULT_USER_AGENT})


def test_fetch_page_success_and_user_agent():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["ua"] = request.headers.get("user-agent")
        return httpx.Response(200, text="<p>hello</p>")

    fetcher = PageFetcher(client=_client(handler), respect_robots=False)
    res = fetcher.fetch_page("https://acme.com/about")
    assert res.ok is True
    assert res.status == 200
    assert res.body == "<p>hello</p>"
    assert seen["ua"].startswith("CleanChoiceBot/")
    # fetch_page is the only entry point handed to the spider
    assert not callable(fetcher)


def test_fetch_page_non_success_status():
    fetcher = PageFetcher(client=_client(lambda req: httpx.Response(404, text="nope")), respect_robots=False)
    res = fetcher.fetch_page("https://acme.com/privacy")
    assert res.ok is False
    assert res.status == 404
    assert res.body == ""


def test_fetch_page_network_error_does_not_raise():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = PageFetcher(client=_client(handler), respect_robots=False)
    res = fetcher.fetch_page("https://down.example/")
    assert res.ok is False
    assert res.status == 0
    assert "refused" in res.error


def test_robots_disallow_blocks_page_and_is_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        if request.url.path == "/robots.txt":
            return httpx.Response(200, text="User-agent: *\nDisallow: /privacy\n")
        return httpx.Response(200, text="<p>ok</p>")

    fetcher = PageFetcher(client=_client(handler))
    assert fetcher.fetch_page("https://acme.com/about").ok is True
    blocked = fetcher.fetch_page("https://acme.com/privacy")
    assert blocked.ok is False
    assert blocked.error == "disallowed by robots.txt"
    assert calls == ["/robots.txt", "/about"]


def test_missing_robots_allows_everything():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/robots.txt":
            return httpx.Response(404)
        return httpx.Response(200, text="fine")

    with PageFetcher(client=_client(handler)) as fetcher:
        assert fetcher.fetch_page("https://acme.com/privacy").ok is True


def test_robots_server_error_disallows_host():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/robots.txt":
            return httpx.Response(503)
        return httpx.Response(200, text="fine")

    fetcher = PageFetcher(client=_client(handler))
    assert fetcher.fetch_page("https://acme.com/").ok is False


def test_slow_robots_on_one_host_does_not_block_another():
    slow_started = threading.Event()
    fast_done = threading.Event()
    waited = {}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/robots.txt":
            if request.url.host == "slow.example":
                slow_started.set()
                waited["released"] = fast_done.wait(timeout=2)
            return httpx.Response(404)
        if request.url.host == "fast.example":
            fast_done.set()
        return httpx.Response(200, text="ok")

    fetcher = PageFetcher(client=_client(handler))
    results = []
    t = threading.Thread(target=lambda: results.append(fetcher.fetch_page("https://slow.example/")))
    t.start()
    assert slow_started.wait(timeout=2)
    assert fetcher.fetch_page("https://fast.example/").ok is True
    t.join(timeout=5)
    assert waited["released"] is True
    assert results[0].ok is True
