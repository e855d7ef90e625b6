import pytest

from sieveql import DEFAULT_CONFIG, PaginationPolicy, SieveConfig


def test_defaults():
    assert DEFAULT_CONFIG.pagination_policy is PaginationPolicy.reject
    assert DEFAULT_CONFIG.max_take is None
    assert DEFAULT_CONFIG.warn_on_discarded_operators is True
    assert DEFAULT_CONFIG.allow_raw is False
    assert DEFAULT_CONFIG.max_filter_depth == 64


def test_from_env_reads_prefixed_variables():
    cfg = SieveConfig.from_env(environ={
        'SIEVEQL_PAGINATION_POLICY': 'CLAMP',
        'SIEVEQL_MAX_TAKE': '250',
        'SIEVEQL_WARN_ON_DISCARDED_OPERATORS': 'no',
        'SIEVEQL_ALLOW_RAW': 'true',
        'SIEVEQL_MAX_FILTER_DEPTH': '8',
    })
    assert cfg == SieveConfig(
        pagination_policy=PaginationPolicy.clamp,
        max_take=250,
        warn_on_discarded_operators=False,
        allow_raw=True,
        max_filter_depth=8,
    )


def test_from_env_custom_prefix_and_missing_values():
    cfg = SieveConfig.from_env(prefix='APP_', environ={'SIEVEQL_ALLOW_RAW': '1', 'APP_MAX_TAKE': ''})
    assert cfg == SieveConfig()


def test_from_env_uses_process_environment(monkeypatch):
    monkeypatch.setenv('SIEVEQL_MAX_TAKE', '5')
    assert SieveConfig.from_env().max_take == 5


@pytest.mark.parametrize("environ", [
    {'SIEVEQL_ALLOW_RAW': 'maybe'},
    {'SIEVEQL_PAGINATION_POLICY': 'truncate'},
    {'SIEVEQL_MAX_TAKE': '0'},
    {'SIEVEQL_MAX_FILTER_DEPTH': '0'},
])
def test_from_env_rejects_invalid_values(environ):
    with pytest.raises(ValueError):
        SieveConfig.from_env(environ=environ)


def test_policy_accepts_plain_strings():
    assert SieveConfig(pagination_policy='clamp').pagination_policy is PaginationPolicy.clamp
