"""
Sitebuilder Element Tree Store Test Suite

Test Files:
1. test_store_elements.py - Mutations, selection, gating through the store
2. test_store_notifications.py - Subscribe, unsubscribe, no-op silence
3. test_store_pages.py - Multi-page editing and page settings
"""
