"""crudgen -- CRUD scaffolding generator for Laravel applications.

Given a singular entity name plus a compact field/relation description,
``crudgen`` produces an Eloquent model, migration columns, an API resource
controller, a FormRequest with validation rules, a route registration and
Blade view stubs.

Quick usage::

    from crudgen import Config, CrudGenerator

    result = CrudGenerator(Config(project_root="./my-app")).run(
        "project",
        fields="name:string, status:enum(open,closed)",
        relations="tasks:hasMany",
    )
"""

from crudgen.config import Config
from crudgen.pipeline import CrudGenerator, RunOutcome, RunResult

__all__ = [
    "Config",
    "CrudGenerator",
    "RunOutcome",
    "RunResult",
]

__version__ = "0.1.0"
