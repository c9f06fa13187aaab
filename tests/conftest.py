"""
Pytest configuration and shared fixtures

This file contains test fixtures that can be used across all tests.
Fixtures are reusable components that set up test preconditions.

Learn more: https://docs.pytest.org/en/stable/fixture.html
"""

import os

import pytest


@pytest.fixture(scope="session")
def database_url() -> str:
    """
    Provide database URL for integration tests.

    Returns:
        str: PostgreSQL connection URL, or an empty string when not configured
    """
    return os.getenv("TEST_DATABASE_URL", "")


@pytest.fixture(scope="function")
def sample_publication() -> dict:
    """
    Provide a complete publication in the current field naming.

    Scope: function (created fresh for each test)

    Returns:
        dict: Sample publication data
    """
    return {
        "title": "Vendo Casa Bonita en San Blas",
        "description": "Casa de dos pisos con jardín, cerca a la plaza.",
        "category": "inmuebles",
        "subcategory": "casas",
        "price": 350000,
        "currency": "USD",
        "location": {
            "city": "Cusco",
            "district": "San Blas",
            "address": "Calle Tandapata 123",
        },
        "contact": {
            "name": "María Quispe",
            "phone": "984111222",
            "whatsapp": "984111222",
            "email": "maria@example.com",
        },
        "images": ["https://example.com/casa-1.jpg", "https://example.com/casa-2.jpg"],
        "features": {"bedrooms": 3, "bathrooms": 2},
    }


@pytest.fixture(scope="function")
def legacy_publication() -> dict:
    """
    Provide a publication exported with the legacy field names.

    Returns:
        dict: Publication using categorySlug, amount, attributes and contact.phones
    """
    return {
        "id": "pub_1700000000_ab12cd34",
        "title": "Toyota Hilux 2018 4x4",
        "description": "Camioneta en excelente estado, único dueño.",
        "categorySlug": "vehiculos",
        "subcategorySlug": "camionetas",
        "subSubcategorySlug": "4x4",
        "amount": "85000",
        "attributes": {"year": 2018, "mileage": "60000 km"},
        "contact": {
            "name": "Carlos",
            "phones": ["974333444", "974555666"],
        },
    }


@pytest.fixture(scope="function")
def sample_publication_batch() -> list[dict]:
    """
    Provide a batch of minimal publications (one per category style).

    Returns:
        list[dict]: List of sample publications
    """
    return [
        {
            "title": "Se necesita cocinero",
            "description": "Restaurante en el centro busca cocinero con experiencia.",
            "category": "empleos",
        },
        {
            "title": "Clases de guitarra",
            "description": "Clases a domicilio para todas las edades.",
            "category": "servicios",
            "price": "50",
        },
        {
            "title": "Concierto de rock",
            "description": "Sábado en el coliseo.",
            "category": "eventos",
            "price": 30,
        },
    ]


# Mark tests based on their type for selective running
def pytest_configure(config):
    """
    Register custom pytest markers.

    This allows us to run specific test categories:
    - pytest -m unit        (run only unit tests)
    - pytest -m integration (run only integration tests)
    - pytest -m "not slow"  (skip slow tests)
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (isolated, fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (>1 second)"
    )
