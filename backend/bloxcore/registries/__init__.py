"""String-keyed registries for actions, handlers, effects, selectors and views."""
