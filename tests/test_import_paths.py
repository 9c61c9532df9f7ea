from __future__ import annotations


def test_package_paths_work() -> None:
    import implindex
    from implindex.api import create_api_app
    from implindex.core import ChannelState, HandoffChannel, ImplementorRegistry, PageContext
    from implindex.io import load_fragment
    from implindex.runtime import ImplIndexServer, create_app, run
    from implindex.sdk import ImplIndexClient

    assert implindex.run is run
    assert implindex.PageContext is PageContext
    assert create_api_app is not None
    assert create_app is not None
    assert ChannelState.AWAITING_CONSUMER.value == "awaiting-consumer"
    assert HandoffChannel is not None
    assert ImplementorRegistry is not None
    assert load_fragment is not None
    assert ImplIndexServer is not None
    assert ImplIndexClient is not None
