"""Task-aware assistant core.

One request runs normalize -> classify -> (prompt ->) invoke/fallback:

- `context` annotates task snapshots with overdue flags and counts.
- `intent` maps free text to an `Intent` by ordered keyword rules.
- `replies` answers every intent from the task list alone.
- `prompts` renders the instruction text for the LLM path.
- `orchestrator` picks the response path and validates provider output
  against the `AIResponse` contract, falling back to `replies` on failure.
- `service` is the caller: provider selection and the failure cooldown.

`emails` reuses the provider path for single-email triage.
"""
