"""Support ticket quality audit with a rate-limited LLM batch analyzer."""
