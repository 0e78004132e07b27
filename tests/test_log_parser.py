from rotatonator.core.data import RosterConfig, RosterReplaced
from rotatonator.core.log_parser import LogParser, parse_chain_segments, roster_from_import

from helpers import T0, log_line


def make_parser(**kwargs) -> LogParser:
    return LogParser(RosterConfig(healers=["Alice", "Bob", "Carol"], **kwargs))


def parse_cast(parser: LogParser, message: str):
    entry = parser.parse_line(log_line(message))
    assert entry is not None
    return parser.parse_cast_marker(entry)


def test_parse_line_reads_timestamp():
    parser = make_parser()
    entry = parser.parse_line(log_line("Alice tells the raid, 'hello'"))
    assert entry.timestamp == T0
    assert entry.message == "Alice tells the raid, 'hello'"


def test_parse_line_rejects_lines_without_timestamp():
    assert make_parser().parse_line("no timestamp here") is None


def test_cast_marker_with_target():
    parser = make_parser()
    assert parse_cast(parser, "Carol tells the raid, 'D&D 333 CH - Tankface - Carol'") == (3, "Tankface")


def test_cast_marker_without_target():
    parser = make_parser()
    assert parse_cast(parser, "You tell your raid, 'D&D 111 CH'") == (1, None)


def test_cast_marker_target_with_spaces():
    parser = make_parser()
    assert parse_cast(parser, "Bob shouts, 'D&D 22 CH - a gnoll pup - Bob'") == (2, "a gnoll pup")


def test_cast_marker_letters_and_case():
    parser = make_parser()
    assert parse_cast(parser, "Zed tells the raid, 'd&d aaa ch'") == (10, None)


def test_cast_marker_requires_uniform_code():
    parser = make_parser()
    assert parse_cast(parser, "Alice tells the raid, 'D&D 123 CH'") is None


def test_cast_marker_rejects_mixed_case_code():
    parser = make_parser()
    assert parse_cast(parser, "H9 tells the raid, 'D&D aAa CH'") is None
    assert parse_cast(parser, "H9 tells the raid, 'D&D ııı CH'") is None
    assert parse_cast(parser, "H9 tells the raid, 'D&D AAA CH'") == (10, None)


def test_cast_marker_requires_prefix_and_keyword():
    parser = make_parser()
    assert parse_cast(parser, "Alice tells the raid, 'XYZ 111 CH'") is None
    assert parse_cast(parser, "Alice tells the raid, 'D&D 111 heal'") is None
    assert parse_cast(parser, "Alice tells the raid, 'D&D 111 CHEESE'") is None


def test_prefix_change_applies_immediately():
    roster = RosterConfig(healers=["Alice"])
    parser = LogParser(roster)
    message = "Alice tells the raid, 'GG 111 CH'"
    assert parse_cast(parser, message) is None
    roster.chain_prefix = "GG"
    assert parse_cast(parser, message) == (1, None)


def test_roster_import():
    parser = make_parser()
    line = log_line("Raidlead tells the raid, 'Rotatonator set_chain: 111 Alice, 222 Bob, set_delay: 5'")
    assert parser.is_roster_import(line)
    assert parser.parse_roster_import(line) == RosterReplaced(healers=("Alice", "Bob"), delay_seconds=5.0)


def test_roster_import_skips_malformed_segments():
    parser = make_parser()
    line = "Rotatonator set_chain: 111 Alice, garbage, 222 Bob, set_delay: 5"
    imported = parser.parse_roster_import(line)
    assert imported.healers == ("Alice", "Bob")


def test_roster_import_with_letter_codes():
    parser = make_parser()
    line = "rotatonator SET_CHAIN: 999 Ivy, AAA Jan, BBB Kim, set_delay: 2"
    assert parser.parse_roster_import(line).healers == ("Ivy", "Jan", "Kim")


def test_roster_import_without_healers_is_discarded():
    parser = make_parser()
    line = "Rotatonator set_chain: garbage, more, set_delay: 5"
    assert parser.is_roster_import(line)
    assert parser.parse_roster_import(line) is None


def test_roster_import_with_zero_delay_is_discarded():
    parser = make_parser()
    assert parser.parse_roster_import("Rotatonator set_chain: 111 Alice, set_delay: 0") is None


def test_roster_import_with_untimeable_delay_is_discarded():
    parser = make_parser()
    assert parser.parse_roster_import("Rotatonator set_chain: 111 Alice, set_delay: 3000000") is None
    assert parser.parse_roster_import("Rotatonator set_chain: 111 Alice, set_delay: 3600").delay_seconds == 3600.0


def test_roster_from_matched_import():
    parser = make_parser()
    m = parser.match_roster_import("Lead says, 'Rotatonator set_chain: 111 Ivy, 222 Jan, set_delay: 7'")
    assert m is not None
    assert roster_from_import(m) == RosterReplaced(healers=("Ivy", "Jan"), delay_seconds=7.0)


def test_non_import_lines():
    parser = make_parser()
    assert not parser.is_roster_import("Alice tells the raid, 'D&D 111 CH'")
    assert parser.parse_roster_import("Rotatonator set_delay: 4") is None


def test_parse_chain_segments():
    assert parse_chain_segments("111 Alice, garbage, 222 Bob") == ["Alice", "Bob"]
    assert parse_chain_segments("") == []
