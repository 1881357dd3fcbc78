"""Domain logic for tiddler storage, revisioning and listing."""
