class SamplerWarning(UserWarning):
    """A warning for the GSA samplers."""

    pass
