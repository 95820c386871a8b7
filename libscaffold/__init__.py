"""libscaffold -- generate Angular/Meteor libraries inside an Angular workspace."""

__version__ = "0.1.0"
