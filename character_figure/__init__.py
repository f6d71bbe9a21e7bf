"""Character Figure.

Backend for an AI character-figure image and video generator.

High-level architecture
-----------------------

- ``character_figure.core``:

  - Logging and Logfire monitoring configuration.
  - The database layer: SQLModel entities and async repositories for users,
    orders, the credits ledger, generations, gallery items and templates.
  - Domain enums shared by services and the API.

- ``character_figure.providers``:

  - Thin async HTTP clients for vendor APIs (Nano Banana, Kling, OpenRouter,
    SiliconFlow, Creem and the Upstash-backed Context7 store).

- ``character_figure.server.services``:

  - Business logic: credits consumption, order fulfillment, checkout,
    character figure generation, history, gallery and video workflows.

- ``character_figure.server``:

  - The FastAPI application. Every JSON route answers with the
    ``{code, message, data}`` envelope.

Typical workflow
----------------

1. A user signs in and receives a bearer token plus the new-user credit grant.
2. The user buys credits through a Creem checkout.
3. Creem calls the signed webhook, which marks the order paid and grants credits.
4. Generations consume credits in FIFO order of expiry and land in the history.
"""
