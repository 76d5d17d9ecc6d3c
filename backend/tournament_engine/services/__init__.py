"""
Services Layer

Business logic for tournament structure:
- Pure planners (bracket_generator, round_robin, tennis_scoring, standings)
  work on plain data and never touch the database
- Orchestrators (generation, result, advancement, report) take a
  TournamentRepository and own the transaction boundary
- Nothing here depends on HTTP request/response objects
"""
