"""
Conversion Policy - Tunable parameters for the conversion pipeline

The ConversionPolicy gathers the few knobs the pipeline exposes: the macro
expansion depth ceiling, whether macros may be redefined, and whether LaTeX
comments survive into the Typst output.

Fun fact: TeX has its own expansion guard - "TeX capacity exceeded, sorry
[input stack size=5000]" - ours just fails a lot sooner and more politely!
"""

from pydantic import BaseModel, Field

DEFAULT_MAX_MACRO_DEPTH = 32


class ConversionPolicy(BaseModel):
    """
    Conversion parameters

    The defaults reproduce plain LaTeX behavior: redefinition overwrites
    (last write wins) and comments are carried over as Typst comments.
    """

    max_macro_depth: int = Field(
        default=DEFAULT_MAX_MACRO_DEPTH,
        ge=1,
        le=1024,
        description="Maximum nesting of macro expansions before giving up",
    )

    allow_macro_redefinition: bool = Field(
        default=True,
        description="Whether a later \\newcommand may overwrite an earlier one",
    )

    keep_comments: bool = Field(
        default=True,
        description="Emit LaTeX % comments as Typst // comments",
    )

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "description": "Parameters controlling LaTeX to Typst conversion"
        },
    }


# Default global policy instance
default_policy = ConversionPolicy()
