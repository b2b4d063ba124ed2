"""
Configuration constants to replace magic numbers throughout recmatch
"""

import os
import tempfile

# Member names that take part in override-by-presence synthesis
MATCH_OPERATOR_NAME = "Match"
EQUALS_MEMBER_NAME = "Equals"
HASH_MEMBER_NAME = "GetHashCode"
DISPLAY_MEMBER_NAME = "ToString"

# Order-dependent hash combine. These values are part of the persisted-hash
# contract and must never change between releases.
HASH_SEED = 0x2D2816FE
HASH_MULTIPLIER = 0xA5555529
HASH_BITS = 64
HASH_MASK = (1 << HASH_BITS) - 1

# Parser configuration (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "recmatch_parser.cache")

# Source files
DEFAULT_SOURCE_FILE = "main.rec"
DEFAULT_FILE_ENCODING = "utf-8"

# Literal spellings shared by the parser and the runtime display
NULL_LITERAL = "null"
BOOLEAN_TRUE_LITERAL = "true"
BOOLEAN_FALSE_LITERAL = "false"

# Environment switches
COLOR_ENV_VAR = "RECMATCH_COLOR"
DEBUG_PASSES_ENV_VAR = "RECMATCH_DEBUG_PASSES"
