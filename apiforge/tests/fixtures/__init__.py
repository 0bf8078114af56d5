"""Test fixtures for apiforge tests.

This module provides sample OpenAPI documents used across the test suite.
"""

# Minimal OpenAPI 3.0 document for basic testing
MINIMAL_OPENAPI_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Minimal API', 'version': '1.0.0'},
    'paths': {},
}

# One operation with a path parameter, a success response and an error response
WIDGET_API_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Widget API', 'version': '1.0.0'},
    'paths': {
        '/widgets/{id}': {
            'get': {
                'operationId': 'GetWidget',
                'summary': 'Fetch one widget',
                'parameters': [
                    {
                        'name': 'id',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    }
                ],
                'responses': {
                    '200': {
                        'description': 'The widget',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'object',
                                    'properties': {'name': {'type': 'string'}},
                                }
                            }
                        },
                    },
                    '404': {
                        'description': 'Not found',
                        'content': {
                            'application/json': {
                                'schema': {
                                    'type': 'object',
                                    'properties': {'message': {'type': 'string'}},
                                }
                            }
                        },
                    },
                },
            }
        }
    },
}

# Petstore-like document exercising every component section
PETSTORE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Petstore API', 'version': '1.0.0'},
    'paths': {
        '/pets': {
            'get': {
                'operationId': 'listPets',
                'summary': 'List all pets',
                'tags': ['pets'],
                'parameters': [{'$ref': '#/components/parameters/limit'}],
                'responses': {
                    '200': {
                        'description': 'A page of pets',
                        'headers': {
                            'X-Rate-Limit': {'$ref': '#/components/headers/X-Rate-Limit'}
                        },
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Pets'}
                            }
                        },
                    },
                    'default': {
                        'description': 'Unexpected error',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Error'}
                            }
                        },
                    },
                },
            },
            'post': {
                'operationId': 'createPet',
                'summary': 'Create a pet',
                'tags': ['pets'],
                'requestBody': {'$ref': '#/components/requestBodies/PetBody'},
                'responses': {
                    '201': {'description': 'Created'},
                    'default': {'description': 'Unexpected error'},
                },
            },
        },
        '/pets/{petId}': {
            'parameters': [{'$ref': '#/components/parameters/petId'}],
            'get': {
                'operationId': 'showPetById',
                'summary': 'Info for a specific pet',
                'tags': ['pets'],
                'responses': {
                    '200': {'$ref': '#/components/responses/PetResponse'},
                    'default': {'description': 'Unexpected error'},
                },
            },
        },
        '/pets/{petId}/photo': {
            'put': {
                'operationId': 'uploadPhoto',
                'parameters': [
                    {
                        'name': 'petId',
                        'in': 'path',
                        'required': True,
                        'schema': {'type': 'string'},
                    }
                ],
                'requestBody': {
                    'content': {
                        'application/octet-stream': {
                            'schema': {'type': 'string', 'format': 'binary'}
                        }
                    }
                },
                'responses': {'204': {'description': 'Stored'}},
            }
        },
    },
    'components': {
        'schemas': {
            'Pet': {
                'type': 'object',
                'properties': {
                    'id': {'type': 'integer', 'format': 'int64'},
                    'name': {'type': 'string'},
                    'tag': {'type': 'string'},
                    'owner': {'$ref': '#/components/schemas/Owner'},
                    'born': {'type': 'string', 'format': 'date'},
                },
            },
            'Owner': {
                'type': 'object',
                'properties': {
                    'name': {'type': 'string'},
                    'address': {
                        'type': 'object',
                        'properties': {
                            'street': {'type': 'string'},
                            'city': {'type': 'string'},
                        },
                    },
                },
            },
            'Pets': {'type': 'array', 'items': {'$ref': '#/components/schemas/Pet'}},
            'Error': {
                'type': 'object',
                'properties': {
                    'code': {'type': 'integer', 'format': 'int32'},
                    'message': {'type': 'string'},
                },
            },
            'Labels': {
                'type': 'object',
                'additionalProperties': {'type': 'string'},
            },
        },
        'parameters': {
            'limit': {
                'name': 'limit',
                'in': 'query',
                'description': 'How many items to return at one time',
                'required': False,
                'schema': {'type': 'integer', 'format': 'int32'},
            },
            'petId': {
                'name': 'petId',
                'in': 'path',
                'required': True,
                'schema': {'type': 'string'},
            },
        },
        'requestBodies': {
            'PetBody': {
                'required': True,
                'content': {
                    'application/json': {
                        'schema': {'$ref': '#/components/schemas/Pet'}
                    }
                },
            }
        },
        'responses': {
            'PetResponse': {
                'description': 'Expected response to a valid request',
                'content': {
                    'application/json': {
                        'schema': {'$ref': '#/components/schemas/Pet'}
                    }
                },
            }
        },
        'headers': {
            'X-Rate-Limit': {
                'description': 'Calls per hour allowed by the user',
                'schema': {'type': 'integer'},
            }
        },
    },
}


def with_operation(operation: dict, path: str = '/things', method: str = 'get') -> dict:
    """Build a document with a single operation and no components."""
    return {
        'openapi': '3.0.0',
        'info': {'title': 'Test API', 'version': '1.0.0'},
        'paths': {path: {method: operation}},
    }


def with_schemas(schemas: dict, paths: dict | None = None) -> dict:
    """Build a document declaring only component schemas (and optional paths)."""
    return {
        'openapi': '3.0.0',
        'info': {'title': 'Test API', 'version': '1.0.0'},
        'paths': paths or {},
        'components': {'schemas': schemas},
    }


# A linked list and a pair of structs referring to each other
RECURSIVE_SPEC = {
    'openapi': '3.0.0',
    'info': {'title': 'Recursive API', 'version': '1.0.0'},
    'paths': {
        '/nodes/{id}': {
            'get': {
                'operationId': 'getNode',
                'parameters': [
                    {'name': 'id', 'in': 'path', 'required': True, 'schema': {'type': 'string'}}
                ],
                'responses': {
                    '200': {
                        'description': 'The node',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/Node'}
                            }
                        },
                    }
                },
            }
        }
    },
    'components': {
        'schemas': {
            'Node': {
                'type': 'object',
                'properties': {
                    'value': {'type': 'string'},
                    'next': {'$ref': '#/components/schemas/Node'},
                },
            },
            'A': {
                'type': 'object',
                'properties': {'b': {'$ref': '#/components/schemas/B'}},
            },
            'B': {
                'type': 'object',
                'properties': {
                    'a': {'$ref': '#/components/schemas/A'},
                    'items': {
                        'type': 'array',
                        'items': {'$ref': '#/components/schemas/A'},
                    },
                },
            },
        }
    },
}
