"""
Tests for route table normalization.
"""

import pytest

from bridgeport.core.catalog import MalformedShape, RoutesParsed, parse_routes

from conftest import BASE_SEPOLIA, SEPOLIA, USDC_BASE_SEPOLIA, USDC_SEPOLIA


def _record(**overrides):
    record = {
        "originChainId": BASE_SEPOLIA,
        "destinationChainId": SEPOLIA,
        "originToken": USDC_BASE_SEPOLIA,
        "destinationToken": USDC_SEPOLIA,
        "originTokenSymbol": "USDC",
        "isNative": False,
    }
    record.update(overrides)
    return record


# =============================================================================
# Envelopes
# =============================================================================

class TestEnvelopes:
    """Accepted and rejected payload shapes."""

    @pytest.mark.parametrize(
        "payload",
        [
            [_record()],
            {"routes": [_record()]},
            {"availableRoutes": [_record()]},
            {"data": [_record()]},
        ],
    )
    def test_known_envelopes_parse(self, payload):
        result = parse_routes(payload)

        assert isinstance(result, RoutesParsed)
        assert len(result.routes) == 1
        assert result.routes[0].origin_chain_id == BASE_SEPOLIA

    def test_envelope_keys_checked_in_order(self):
        result = parse_routes({"routes": [_record()], "data": [_record(), _record()]})

        assert isinstance(result, RoutesParsed)
        assert len(result.routes) == 1

    @pytest.mark.parametrize(
        "payload",
        [
            {"items": [_record()]},
            {"routes": "not-a-list"},
            "routes",
            42,
            None,
        ],
    )
    def test_unknown_shape_is_malformed(self, payload):
        result = parse_routes(payload)

        assert isinstance(result, MalformedShape)
        assert "unexpected response shape" in result.reason

    def test_empty_list_is_valid(self):
        result = parse_routes([])

        assert result == RoutesParsed(routes=(), dropped=0)


# =============================================================================
# Records
# =============================================================================

class TestRecords:
    """Per-record typing rules."""

    def test_string_chain_id_is_dropped(self):
        result = parse_routes([_record(), _record(originChainId="84532")])

        assert isinstance(result, RoutesParsed)
        assert len(result.routes) == 1
        assert result.dropped == 1

    def test_missing_token_address_is_dropped(self):
        record = _record()
        del record["destinationToken"]

        result = parse_routes([record])

        assert result.routes == ()
        assert result.dropped == 1

    def test_non_object_records_are_dropped(self):
        result = parse_routes([_record(), "junk", None, 7])

        assert len(result.routes) == 1
        assert result.dropped == 3

    def test_non_string_symbol_becomes_none(self):
        result = parse_routes([_record(originTokenSymbol=123, destinationTokenSymbol="")])

        route = result.routes[0]
        assert route.origin_token_symbol is None
        assert route.destination_token_symbol is None

    @pytest.mark.parametrize("flag,expected", [(1, True), ("yes", True), (0, False), (None, False)])
    def test_is_native_is_truthy_coerced(self, flag, expected):
        result = parse_routes([_record(isNative=flag)])

        assert result.routes[0].is_native is expected

    def test_missing_is_native_defaults_false(self):
        record = _record()
        del record["isNative"]

        result = parse_routes([record])

        assert result.routes[0].is_native is False

    def test_extra_fields_are_ignored(self):
        result = parse_routes([_record(l1TokenAddress="0xabc", isEnabled=True)])

        assert len(result.routes) == 1
