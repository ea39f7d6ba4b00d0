"""Unit tests for the domain rule table."""

import json

import pytest
from pydantic import ValidationError

from pricetrack.errors import RuleSourceError
from pricetrack.rules import DomainRuleTable, RuleEntry, load_rules


def write_rule(directory, name, rule):
    path = directory / name
    path.write_text(json.dumps(rule))
    return path


@pytest.fixture
def rules_dir(tmp_path):
    """Create a directory with a few per-domain rule files."""
    directory = tmp_path / "rules"
    directory.mkdir()
    write_rule(directory, "tiki.vn.json", {"domain": "tiki.vn", "parser": "tiki", "color": "#189eff"})
    write_rule(
        directory,
        "shopee.vn.json",
        {"parser": "shopee", "color": "#f94d30", "productId": r"i\.(\d+)\.(\d+)"},
    )
    write_rule(directory, "fptshop.com.vn.json", {})
    return directory


class TestRuleEntry:
    """Tests for RuleEntry."""

    def test_from_rule(self):
        entry = RuleEntry.from_rule(
            "tiki.vn", {"domain": "tiki.vn", "parser": "tiki", "color": "#189eff", "api": "x"}
        )

        assert entry.hostname == "tiki.vn"
        assert entry.parser == "tiki"
        assert entry.color == "#189eff"
        assert entry.options == {"api": "x"}

    def test_parser_defaults_to_hostname(self):
        entry = RuleEntry.from_rule("fptshop.com.vn", {})
        assert entry.parser == "fptshop.com.vn"
        assert entry.color is None

    def test_short_color(self):
        assert RuleEntry.from_rule("a.com", {"color": "#abc"}).color == "#abc"

    def test_invalid_color(self):
        with pytest.raises(ValidationError):
            RuleEntry.from_rule("a.com", {"color": "blue"})

    def test_rule_must_be_object(self):
        with pytest.raises(ValueError):
            RuleEntry.from_rule("a.com", ["tiki"])

    def test_immutability(self):
        entry = RuleEntry(hostname="a.com", parser="a")
        with pytest.raises(ValidationError):
            entry.parser = "b"


class TestDomainRuleTable:
    """Tests for DomainRuleTable."""

    @pytest.fixture
    def table(self):
        return DomainRuleTable.from_mapping(
            {
                "shop.example.com": {"parser": "example", "color": "#112233"},
                "www.Other.com": {"parser": "other"},
            }
        )

    def test_supported_hosts(self, table):
        assert table.supported_hosts() == frozenset({"shop.example.com", "other.com"})

    def test_hostnames_are_canonicalized(self, table):
        """Test rule keys use the same host rules as URLs."""
        assert "other.com" in table
        assert "www.Other.com" not in table

    def test_color_of(self, table):
        assert table.color_of("shop.example.com") == "#112233"
        assert table.color_of("other.com") is None
        assert table.color_of("unknown.com") is None

    def test_parser_of(self, table):
        assert table.parser_of("shop.example.com") == "example"
        assert table.parser_of("unknown.com") is None

    def test_get(self, table):
        assert table.get("other.com").parser == "other"
        assert table.get("example.com") is None

    def test_exact_match_only(self, table):
        """Test there is no suffix matching."""
        assert "example.com" not in table
        assert "a.shop.example.com" not in table

    def test_colors(self, table):
        assert table.colors() == {"shop.example.com": "#112233"}

    def test_iteration_is_sorted(self, table):
        assert list(table) == ["other.com", "shop.example.com"]
        assert len(table) == 2

    def test_rules_view_is_read_only(self, table):
        with pytest.raises(TypeError):
            table.rules["new.com"] = RuleEntry(hostname="new.com", parser="new")

    def test_duplicate_hostnames(self):
        """Test two keys that canonicalize to the same host are rejected."""
        with pytest.raises(ValueError, match="duplicate"):
            DomainRuleTable.from_mapping({"www.a.com": {}, "a.com": {}})

    def test_empty_table(self):
        table = DomainRuleTable([])
        assert len(table) == 0
        assert table.supported_hosts() == frozenset()


class TestLoadRules:
    """Tests for load_rules."""

    def test_load_directory(self, rules_dir):
        table = load_rules(rules_dir)

        assert table.supported_hosts() == frozenset({"tiki.vn", "shopee.vn", "fptshop.com.vn"})
        assert table.source == rules_dir

    def test_directory_hostname_from_file_stem(self, rules_dir):
        table = load_rules(rules_dir)

        shopee = table.get("shopee.vn")
        assert shopee.parser == "shopee"
        assert shopee.options == {"productId": r"i\.(\d+)\.(\d+)"}

    def test_domain_key_wins_over_file_name(self, tmp_path):
        write_rule(tmp_path, "legacy-name.json", {"domain": "www.tiki.vn", "parser": "tiki"})
        table = load_rules(tmp_path)
        assert table.supported_hosts() == frozenset({"tiki.vn"})

    def test_non_json_files_ignored(self, rules_dir):
        (rules_dir / "README.md").write_text("# rules")
        assert len(load_rules(rules_dir)) == 3

    def test_load_mapping_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(
            json.dumps(
                {
                    "shop.example.com": {"parser": "example", "color": "#fff"},
                    "other.com": {"parser": "other"},
                }
            )
        )

        table = load_rules(str(path))

        assert table.supported_hosts() == frozenset({"shop.example.com", "other.com"})
        assert table.color_of("shop.example.com") == "#fff"

    def test_missing_source(self, tmp_path):
        with pytest.raises(RuleSourceError) as exc_info:
            load_rules(tmp_path / "missing")
        assert exc_info.value.source == tmp_path / "missing"

    def test_empty_directory(self, tmp_path):
        with pytest.raises(RuleSourceError, match="no rules"):
            load_rules(tmp_path)

    def test_malformed_json(self, rules_dir):
        (rules_dir / "broken.com.json").write_text("{not json")
        with pytest.raises(RuleSourceError):
            load_rules(rules_dir)

    def test_rule_file_not_an_object(self, rules_dir):
        (rules_dir / "list.com.json").write_text("[1, 2]")
        with pytest.raises(RuleSourceError, match="JSON object"):
            load_rules(rules_dir)

    def test_invalid_rule(self, rules_dir):
        write_rule(rules_dir, "bad.com.json", {"color": "not-a-color"})
        with pytest.raises(RuleSourceError):
            load_rules(rules_dir)

    def test_invalid_hostname(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"not a host": {}}))
        with pytest.raises(RuleSourceError):
            load_rules(path)

    def test_duplicate_domain_across_files(self, rules_dir):
        write_rule(rules_dir, "tiki-copy.json", {"domain": "tiki.vn"})
        with pytest.raises(RuleSourceError, match="duplicate"):
            load_rules(rules_dir)

    def test_mapping_file_not_an_object(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps(["tiki.vn"]))
        with pytest.raises(RuleSourceError):
            load_rules(path)

    def test_empty_mapping_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{}")
        with pytest.raises(RuleSourceError, match="no rules"):
            load_rules(path)

    def test_rule_source_error_is_runtime_error(self, tmp_path):
        with pytest.raises(RuntimeError):
            load_rules(tmp_path / "missing")

    def test_bundled_rules_load(self):
        """Test the rules shipped in config/rules are valid."""
        from pathlib import Path

        source = Path(__file__).resolve().parents[2] / "config" / "rules"
        table = load_rules(source)

        assert "tiki.vn" in table
        assert table.color_of("tiki.vn") == "#189eff"
