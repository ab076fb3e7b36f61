"""Tests for argument parsing and command dispatch."""

import argparse
from unittest.mock import patch

import pytest

from furscrape import cli
from furscrape.client import Client

BASE = "https://www.furaffinity.net"


@pytest.fixture
def run(session, monkeypatch):
    for name in ("FURSCRAPE_PROXY", "FURSCRAPE_USER_AGENT", "FURSCRAPE_RATE_LIMIT", "FURSCRAPE_COOKIES"):
        monkeypatch.delenv(name, raising=False)

    def factory(config):
        return Client(config, session=session)

    def run(*argv):
        with patch.object(cli, "Client", side_effect=factory):
            cli.main(list(argv))

    return run


def test_build_config_overrides():
    args = cli.parse_args(
        ["whoami", "--proxy", "socks5://h:1", "--rate-limit", "0.5", "--cookie", "a=1", "--cookie", "b=2"]
    )
    config = cli.build_config(args)
    assert config.proxy == "socks5://h:1"
    assert config.rate_limit == 0.5
    assert config.cookies == {"a": "1", "b": "2"}


def test_bad_cookie_is_rejected():
    with pytest.raises(argparse.ArgumentTypeError):
        cli._parse_cookie("nope")


def test_whoami(run, session, capsys):
    session.add(BASE + "/search", '<a id="my-username">me</a>')
    run("whoami", "--rate-limit", "0")
    assert capsys.readouterr().out.strip() == "me"


def test_search(run, session, capsys):
    session.add(
        BASE + "/search/",
        '<section id="gallery-search-results"><figure id="sid-3" class="r-general">'
        '<img src="//t.facdn.net/3@200-1.jpg"><figcaption>'
        '<a href="/view/3/" title="Three">Three</a><a href="/user/x/" title="x">x</a>'
        "</figcaption></figure></section>",
    )
    run("search", "three", "--rate-limit", "0")
    assert "Three by x (general, 3)" in capsys.readouterr().out


def test_transport_failure_exits(run, session):
    session.add(BASE + "/user/bob/", "", status_code=500)
    with pytest.raises(SystemExit) as info:
        run("recent", "bob", "--rate-limit", "0")
    assert info.value.code == 1
