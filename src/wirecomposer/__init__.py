"""Wire composer: build, validate and save wire graphs against a component registry."""
