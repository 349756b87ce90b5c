"""
Sitebuilder Drop Resolver Test Suite

Test Files:
1. test_drop_payloads.py - Drag data decoding
2. test_drop_resolve.py - Hit testing and plan resolution
3. test_drop_dispatch.py - Applying drops through the store
"""
