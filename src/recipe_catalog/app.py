import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from . import schemas
from .catalog import Catalog, sql_catalog
from .config import get_settings
from .db import SessionLocal, init_db
from .errors import CatalogError
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize logging and DB once at startup
    configure_logging(get_settings().log_level)
    init_db()
    yield


app = FastAPI(title="Recipe Catalog", lifespan=lifespan)

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogError)
async def catalog_error_handler(request: Request, exc: CatalogError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path,
                   type(exc).__name__, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_catalog(db: Session = Depends(get_db)) -> Catalog:
    return sql_catalog(db, guard_ingredient_delete=get_settings().guard_ingredient_delete)


# Categories


@app.get("/api/categories", response_model=List[schemas.Category])
def list_categories(catalog: Catalog = Depends(get_catalog)):
    return catalog.categories.list()


@app.post("/api/categories", response_model=schemas.Category)
def create_category(payload: schemas.NameCreate, catalog: Catalog = Depends(get_catalog)):
    return catalog.categories.create(payload.name)


@app.get("/api/categories/{category_id}", response_model=schemas.Category)
def get_category(category_id: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.categories.get(category_id)


@app.put("/api/categories/{category_id}", response_model=schemas.Category)
def update_category(
    category_id: str, payload: schemas.NameUpdate, catalog: Catalog = Depends(get_catalog)
):
    return catalog.categories.update(category_id, name=payload.name)


@app.delete("/api/categories/{category_id}")
def delete_category(category_id: str, catalog: Catalog = Depends(get_catalog)):
    catalog.categories.delete(category_id)
    return {"deleted": True}


# Ingredients


@app.get("/api/ingredients", response_model=List[schemas.Ingredient])
def list_ingredients(catalog: Catalog = Depends(get_catalog)):
    return catalog.ingredients.list()


@app.post("/api/ingredients", response_model=schemas.Ingredient)
def create_ingredient(payload: schemas.NameCreate, catalog: Catalog = Depends(get_catalog)):
    return catalog.ingredients.create(payload.name)


@app.get("/api/ingredients/{ingredient_id}", response_model=schemas.Ingredient)
def get_ingredient(ingredient_id: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.ingredients.get(ingredient_id)


@app.put("/api/ingredients/{ingredient_id}", response_model=schemas.Ingredient)
def update_ingredient(
    ingredient_id: str, payload: schemas.NameUpdate, catalog: Catalog = Depends(get_catalog)
):
    return catalog.ingredients.update(ingredient_id, name=payload.name)


@app.delete("/api/ingredients/{ingredient_id}")
def delete_ingredient(ingredient_id: str, catalog: Catalog = Depends(get_catalog)):
    catalog.ingredients.delete(ingredient_id)
    return {"deleted": True}


# Recipes


@app.get("/api/recipes")
def api_list_recipes(
    request: Request,
    response: Response,
    q: Optional[str] = None,
    category_id: Optional[str] = None,
    category_name: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
    catalog: Catalog = Depends(get_catalog),
):
    page = max(page, 1)
    page_size = min(max(page_size, 1), 100)
    items = catalog.recipes.list(
        schemas.RecipeFilter(category_id=category_id, category_name=category_name, search=q)
    )
    total = len(items)
    start = (page - 1) * page_size
    page_items = items[start:start + page_size]

    # RFC 5988 Link header for prev/next pages
    links = []
    if page > 1:
        prev_url = request.url.include_query_params(page=page - 1, page_size=page_size)
        links.append(f'<{prev_url}>; rel="prev"')
    if start + page_size < total:
        next_url = request.url.include_query_params(page=page + 1, page_size=page_size)
        links.append(f'<{next_url}>; rel="next"')
    if links:
        response.headers["Link"] = ", ".join(links)

    return {
        "items": [r.model_dump(mode="json") for r in page_items],
        "total": total,
        "page": page,
        "page_size": page_size,
    }


@app.post("/api/recipes", response_model=schemas.Recipe)
def api_create_recipe(payload: schemas.RecipeCreate, catalog: Catalog = Depends(get_catalog)):
    return catalog.recipes.create(payload)


@app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def api_get_recipe(recipe_id: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.recipes.get(recipe_id)


@app.put("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def api_update_recipe(
    recipe_id: str, payload: schemas.RecipeUpdate, catalog: Catalog = Depends(get_catalog)
):
    return catalog.recipes.update(recipe_id, payload)


@app.delete("/api/recipes/{recipe_id}")
def api_delete_recipe(recipe_id: str, catalog: Catalog = Depends(get_catalog)):
    catalog.recipes.delete(recipe_id)
    return {"deleted": True}


@app.post("/api/recipes/{recipe_id}/publish", response_model=schemas.Recipe)
def api_publish_recipe(recipe_id: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.recipes.publish(recipe_id)


@app.post("/api/recipes/{recipe_id}/archive", response_model=schemas.Recipe)
def api_archive_recipe(recipe_id: str, catalog: Catalog = Depends(get_catalog)):
    return catalog.recipes.archive(recipe_id)


@app.get("/api/recipes/{recipe_id}/scale", response_model=schemas.Recipe)
def api_scale_recipe(recipe_id: str, servings: float, catalog: Catalog = Depends(get_catalog)):
    # whole-number check lives in the service
    return catalog.recipes.scale_recipe(recipe_id, servings)


@app.post("/api/shopping-list", response_model=List[schemas.ShoppingListItem])
def api_shopping_list(
    payload: schemas.ShoppingListRequest, catalog: Catalog = Depends(get_catalog)
):
    return catalog.recipes.generate_shopping_list(payload.recipe_ids)
