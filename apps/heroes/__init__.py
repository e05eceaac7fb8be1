# ================================================================================
"""
The 'heroes' app stores hero reference data in normalized tables and serves
it back as nested documents, through a read-through cache.
"""
