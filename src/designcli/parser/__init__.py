"""Definition parser -- load a document and validate it into the definition model.

Typical usage::

    from designcli.parser import load_definition, extract_definition

    raw = load_definition("shelf.yaml")
    api = extract_definition(raw)

Sub-modules:

* :mod:`~designcli.parser.loader` -- I/O layer (URL, file, stdin) plus
  JSON/YAML format detection.
* :mod:`~designcli.parser.extractor` -- shorthand expansion and pydantic
  validation into :class:`~designcli.models.APIDefinition`.
"""

from designcli.parser.extractor import extract_definition
from designcli.parser.loader import load_definition, parse_document

__all__ = ["load_definition", "parse_document", "extract_definition"]
