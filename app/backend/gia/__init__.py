"""GIA goal-tracking backend: period aggregation and report exports."""
