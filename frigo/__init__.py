"""Describes the Frigo domain. Centres around the recipe and its joins.

Why is this hard?

- It mostly isn't. Recipes are generated by a model served behind an api.
- Persistence is a spreadsheet with an api (Airtable). No foreign keys, no
  transactions, so a recipe is really four tables glued back together on read.
- The only invariants are about the glue: joins point at ingredients that
  exist, instructions come back in order.

Should be able to fake both apis with an httpx transport.
"""
