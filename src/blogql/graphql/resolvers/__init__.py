"""Resolver package for the GraphQL schema.

Each module holds the resolvers for one aggregate; queries and mutations in
``..queries.root`` / ``..mutations.root`` import them lazily.
"""
