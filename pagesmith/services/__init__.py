"""
Services layer - landing page persistence, storage, extraction and publishing.
"""
