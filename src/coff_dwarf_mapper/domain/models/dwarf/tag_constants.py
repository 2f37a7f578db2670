#!/usr/bin/env python3

"""DWARF tag and attribute names the type graph builder acts on."""

DW_TAG_STRUCTURE_TYPE = "DW_TAG_structure_type"
DW_TAG_UNION_TYPE = "DW_TAG_union_type"
DW_TAG_MEMBER = "DW_TAG_member"
DW_TAG_TYPEDEF = "DW_TAG_typedef"
DW_TAG_BASE_TYPE = "DW_TAG_base_type"
DW_TAG_VARIABLE = "DW_TAG_variable"
DW_TAG_CONST_TYPE = "DW_TAG_const_type"
DW_TAG_VOLATILE_TYPE = "DW_TAG_volatile_type"

DW_AT_NAME = "DW_AT_name"
DW_AT_TYPE = "DW_AT_type"
DW_AT_LOCATION = "DW_AT_location"
DW_AT_DATA_MEMBER_LOCATION = "DW_AT_data_member_location"
DW_AT_DECLARATION = "DW_AT_declaration"
DW_AT_SPECIFICATION = "DW_AT_specification"

# Tags whose entries carry a member list
STRUCTURE_TAGS = frozenset({DW_TAG_STRUCTURE_TYPE, DW_TAG_UNION_TYPE})

# Qualifiers followed transparently when resolving a type reference
TRANSPARENT_QUALIFIER_TAGS = frozenset({DW_TAG_CONST_TYPE, DW_TAG_VOLATILE_TYPE})

# Variables nested deeper than this (function locals) are not globals
MAX_GLOBAL_DEPTH = 1
