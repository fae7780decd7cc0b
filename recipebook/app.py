from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from . import crud, schemas
from .config import get_settings
from .db import get_db, init_db
from .errors import NotFound, StorageUnavailable, ValidationFailed
from .log import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize logging and DB once at startup
    setup_logging()
    init_db()
    yield


app = FastAPI(title="Recipe Book", lifespan=lifespan)

# Allow CORS for API clients (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=422, content={"errors": exc.errors})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # keep the same {"errors": {field: [reasons]}} shape as ValidationFailed
    errors = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.setdefault(loc[-1] if loc else "base", []).append(err.get("msg", "is invalid"))
    return JSONResponse(status_code=422, content={"errors": errors})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable):
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


def _link_header(request: Request, page) -> str:
    def url(n):
        return str(request.url.include_query_params(page=n, page_size=page.page_size))

    links = [f'<{url(1)}>; rel="first"']
    if page.has_prev:
        links.append(f'<{url(page.page - 1)}>; rel="prev"')
    if page.has_next:
        links.append(f'<{url(page.page + 1)}>; rel="next"')
    links.append(f'<{url(page.pages)}>; rel="last"')
    return ", ".join(links)


def _page_response(request: Request, response: Response, page) -> schemas.RecipePage:
    response.headers["Link"] = _link_header(request, page)
    return schemas.RecipePage(
        items=[schemas.Recipe.model_validate(r) for r in page.items],
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        pages=page.pages,
    )


@app.get("/healthz")
def health():
    return {"status": "ok"}


@app.get("/api/categories")
def api_categories():
    return {"categories": get_settings().RECIPE_CATEGORIES}


@app.get("/api/recipes", response_model=schemas.RecipePage)
def api_list_recipes(
    request: Request,
    response: Response,
    q: Optional[str] = None,
    query: Optional[str] = None,
    category: Optional[str] = None,
    favorites: bool = False,
    page: int = 1,
    page_size: Optional[int] = None,
    db: Session = Depends(get_db),
):
    result = crud.list_recipes(
        db, q=q or query, category=category, favorites_only=favorites, page=page, page_size=page_size
    )
    return _page_response(request, response, result)


@app.get("/api/recipes/favorites", response_model=schemas.RecipePage)
def api_list_favorites(
    request: Request,
    response: Response,
    page: int = 1,
    page_size: Optional[int] = None,
    db: Session = Depends(get_db),
):
    result = crud.list_recipes(db, favorites_only=True, page=page, page_size=page_size)
    return _page_response(request, response, result)


@app.post("/api/recipes", response_model=schemas.Recipe, status_code=201)
def api_create_recipe(recipe: schemas.RecipeCreate, db: Session = Depends(get_db)):
    return crud.create_recipe(db, recipe.model_dump())


@app.get("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def api_get_recipe(recipe_id: int, db: Session = Depends(get_db)):
    return crud.get_recipe(db, recipe_id)


@app.put("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
@app.patch("/api/recipes/{recipe_id}", response_model=schemas.Recipe)
def api_update_recipe(recipe_id: int, recipe: schemas.RecipeUpdate, db: Session = Depends(get_db)):
    return crud.update_recipe(db, recipe_id, recipe.model_dump(exclude_unset=True))


@app.delete("/api/recipes/{recipe_id}", response_model=schemas.DeleteResponse)
def api_delete_recipe(recipe_id: int, db: Session = Depends(get_db)):
    crud.delete_recipe(db, recipe_id)
    return {"deleted": True}


@app.patch("/api/recipes/{recipe_id}/toggle_favorite", response_model=schemas.FavoriteState)
def api_toggle_favorite(recipe_id: int, db: Session = Depends(get_db)):
    favorite = crud.toggle_favorite(db, recipe_id)
    return {"id": recipe_id, "favorite": favorite}


# Form posts from HTML pages. These answer with a 303 redirect like a
# classic POST/redirect/GET flow.

def _form_fields(name, ingredients, instructions, category, cooking_time, servings, image_url):
    return {
        "name": name,
        "ingredients": ingredients,
        "instructions": instructions,
        "category": category,
        "cooking_time": cooking_time,
        "servings": servings,
        "image_url": image_url,
    }


def _checked(value: Optional[str]) -> bool:
    return (value or "").lower() in ("1", "true", "on", "yes")


@app.post("/recipes")
def create_recipe_form(
    name: str = Form(""),
    ingredients: str = Form(""),
    instructions: str = Form(""),
    category: str = Form(""),
    cooking_time: str = Form(""),
    servings: str = Form(""),
    image_url: str = Form(""),
    favorite: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    fields = _form_fields(name, ingredients, instructions, category, cooking_time, servings, image_url)
    fields["favorite"] = _checked(favorite)
    db_recipe = crud.create_recipe(db, fields)
    return RedirectResponse(url=f"/api/recipes/{db_recipe.id}", status_code=303)


@app.post("/recipes/{recipe_id}/edit")
def edit_recipe_form(
    recipe_id: int,
    name: str = Form(""),
    ingredients: str = Form(""),
    instructions: str = Form(""),
    category: str = Form(""),
    cooking_time: str = Form(""),
    servings: str = Form(""),
    image_url: str = Form(""),
    db: Session = Depends(get_db),
):
    fields = _form_fields(name, ingredients, instructions, category, cooking_time, servings, image_url)
    crud.update_recipe(db, recipe_id, fields)
    return RedirectResponse(url=f"/api/recipes/{recipe_id}", status_code=303)


@app.post("/recipes/{recipe_id}/delete")
def delete_recipe_form(recipe_id: int, db: Session = Depends(get_db)):
    crud.delete_recipe(db, recipe_id)
    return RedirectResponse(url="/api/recipes", status_code=303)


@app.post("/recipes/{recipe_id}/toggle_favorite")
def toggle_favorite_form(recipe_id: int, db: Session = Depends(get_db)):
    crud.toggle_favorite(db, recipe_id)
    return RedirectResponse(url="/api/recipes", status_code=303)
