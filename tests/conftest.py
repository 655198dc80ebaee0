import pytest

from rulesearch.search import RuleMaskCodec

from tests.toy_grammar import branching_universe, build_grammar, small_config, two_rule_universe


@pytest.fixture
def config():
	return small_config()


@pytest.fixture
def two_rule_codec():
	return RuleMaskCodec(two_rule_universe(), build_grammar)


@pytest.fixture
def branching_codec():
	return RuleMaskCodec(branching_universe(), build_grammar)

