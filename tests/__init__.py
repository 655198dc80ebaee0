# --------------------------------------------------------------------
# Requirements: torch, typer, rich, pytest
# --------------------------------------------------------------------
"""
rulesearch test suite

	pytest tests/

SHARED FIXTURES:
	toy_grammar.py                    # Toy rules, grammar, parser, scorers, problems
	conftest.py                       # Problems and small configs as fixtures

COMPONENT TESTS:
	test_grammar.py                   # RuleUniverse, datasets
	test_codec.py                     # Mask <-> grammar, seed generator
	test_moves.py                     # Move application and enumeration
	test_acceptance.py                # First/best improvement contract
	test_evaluation.py                # Parse gate, failure-absorbing scorer
	test_neighbors.py                 # Step budgets, eps, improvement index

RUN TESTS:
	test_loop.py                      # Seeding, monotonicity, determinism, cancellation
	test_orchestrator.py              # Isolation, tie-break, all-fail batches
	test_end_to_end.py                # Two-rule scenario
	test_comparison.py                # Strategy comparison

AMBIENT:
	test_config.py                    # Defaults, validation, JSON round trip
	test_progress.py                  # Channels, dispatcher, sinks, trajectory
	test_cli.py                       # typer commands
"""
