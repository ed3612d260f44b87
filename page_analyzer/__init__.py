"""
page_analyzer package marker.
"""
