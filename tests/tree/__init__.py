"""
Tests for the virtual project tree.

Test organization:
- test_models.py: Node and ProjectTree models, invariants, default seed
- test_store.py: create / update / rename / move / delete and structural sharing
- test_filtering.py: name search projections
"""
