"""
page_analyzer/api package marker.
"""
