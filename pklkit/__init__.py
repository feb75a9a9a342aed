"""Client-side building blocks for the Pkl configuration language: values, versions, message protocol, readers, evaluator options, projects and external readers."""

__version__ = "0.1.0"