"""Parser logic to process the incoming XML data.

* :mod:`restxml.parsers.xml` turns the response body into a tree of nodes.
* :mod:`restxml.parsers.values` converts raw text to Python values, and back.
"""
