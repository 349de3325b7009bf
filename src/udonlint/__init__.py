"""udonlint - static compliance linter for UdonSharp (VRChat) C# scripts."""

__version__ = "0.1.0"
