"""Branch-mining strategy analysis over saved Anvil worlds."""

__version__ = "0.1.0"
