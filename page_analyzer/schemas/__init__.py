"""
page_analyzer/schemas package marker.
"""
