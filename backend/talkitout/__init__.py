"""TalkItOut: student chat companion with counselor escalation."""
