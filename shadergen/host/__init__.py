from shadergen.host.window import Window

__all__ = ["Window"]
