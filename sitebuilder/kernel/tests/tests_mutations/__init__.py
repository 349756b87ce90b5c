"""
Sitebuilder Mutation Engine Test Suite

Test Files:
1. test_mutations_add.py - Insert, root ordering, containers, gating
2. test_mutations_update_delete.py - Field updates, idempotent delete
3. test_mutations_move.py - Positional reorder, move up/down
4. test_mutations_duplicate_transfer.py - Subtree clone, cross-scope moves
5. test_mutations_responsive.py - Per-breakpoint override records
"""
