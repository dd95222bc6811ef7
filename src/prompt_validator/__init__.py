"""
Prompt Validator - scripted end-to-end validation of chat agents.

Sends scripted prompts to an agent session, waits for each reply to
stabilize, collects the tools the agent invoked, and grades every turn
with a deterministic tool check plus an external model judgment.

Main entry points:
    - prompt_validator.main: CLI entrypoint
    - prompt_validator.core.runner: run_all() / run_suite()
    - prompt_validator.models.config: Config and load_env()
"""
