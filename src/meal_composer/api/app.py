"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from meal_composer.api.models import (
    AddFoodRequest,
    CompositionView,
    CustomFoodRequest,
    ItemView,
    NutrientsRequest,
    NutrientsView,
    ProfileView,
    QuantityRequest,
    RenameRequest,
    SaveRequest,
    SearchAddRequest,
    TotalsView,
)
from meal_composer.app_logging import configure_logging
from meal_composer.containers import AppContainer
from meal_composer.domain.composition import CompositionItem
from meal_composer.domain.meals import MealType
from meal_composer.domain.profiles import FoodRecord, NutrientValues, ReferenceProfile
from meal_composer.services.composition import CompositionSession, UnknownItemError
from meal_composer.services.meals import PersistenceError
from meal_composer.services.portions import profile_from_record
from meal_composer.services.sessions import UnknownSessionError
from meal_composer.services.vision import PhotoComposition


def create_app(container: AppContainer) -> FastAPI:  # noqa: C901, PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.photo_compositions = {}

    @app.exception_handler(UnknownSessionError)
    @app.exception_handler(UnknownItemError)
    async def not_found(request: Request, exc: LookupError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": f"Not found: {exc}"},
        )

    @app.exception_handler(PersistenceError)
    async def persistence_failed(
        request: Request, exc: PersistenceError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/compositions", status_code=status.HTTP_201_CREATED)
    async def create_composition(request: Request) -> CompositionView:
        """Start an empty composition."""
        store = request.app.state.container.session_store
        session_id = store.create()
        return _view(request, session_id, store.get(session_id))

    @app.post("/compositions/analyze", status_code=status.HTTP_201_CREATED)
    async def analyze_photo(request: Request) -> CompositionView:
        """Start a composition from a meal photo sent as the raw request body."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        if not image_bytes:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST)
        try:
            photo = await state_container.vision_service.compose(image_bytes)
        except Exception as exc:
            logger.exception("Meal photo analysis failed")
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        session_id = state_container.session_store.create(photo.session)
        request.app.state.photo_compositions[session_id] = photo
        return _view(request, session_id, photo.session)

    @app.get("/compositions/{session_id}")
    async def get_composition(session_id: UUID, request: Request) -> CompositionView:
        """Return the current state of a composition."""
        return _view(request, session_id, _session(request, session_id))

    @app.post("/compositions/{session_id}/items")
    async def add_item(
        session_id: UUID, body: AddFoodRequest, request: Request
    ) -> CompositionView:
        """Add a food given as a food source record."""
        session = _session(request, session_id)
        record = FoodRecord.model_validate(body.model_dump(exclude={"quantity"}))
        _add(session, profile_from_record(record, source="manual"), body.quantity)
        return _view(request, session_id, session)

    @app.post("/compositions/{session_id}/items/search")
    async def search_and_add(
        session_id: UUID, body: SearchAddRequest, request: Request
    ) -> CompositionView:
        """Search the food index and add the first match."""
        state_container: AppContainer = request.app.state.container
        session = _session(request, session_id)
        try:
            results = await state_container.food_search_service.search(
                body.query, limit=1
            )
        except Exception as exc:
            logger.exception("Food search failed for %s", body.query)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        if not results:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="No matching food"
            )
        _add(session, results[0], body.quantity)
        return _view(request, session_id, session)

    @app.patch("/compositions/{session_id}/items/{item_id}")
    async def set_item_quantity(
        session_id: UUID, item_id: UUID, body: QuantityRequest, request: Request
    ) -> CompositionView:
        """Rescale one item by a quantity expression."""
        session = _session(request, session_id)
        session.set_item_quantity(item_id, body.quantity)
        return _view(request, session_id, session)

    @app.put("/compositions/{session_id}/items/{item_id}/nutrients")
    async def edit_item_nutrients(
        session_id: UUID, item_id: UUID, body: NutrientsRequest, request: Request
    ) -> CompositionView:
        """Manually rewrite an item's per-reference values."""
        session = _session(request, session_id)
        session.edit_item_nutrients(item_id, NutrientValues(**body.model_dump()))
        return _view(request, session_id, session)

    @app.put("/compositions/{session_id}/items/{item_id}/food")
    async def replace_item(
        session_id: UUID, item_id: UUID, body: FoodRecord, request: Request
    ) -> CompositionView:
        """Replace an item's food while keeping its portion weight."""
        session = _session(request, session_id)
        session.replace_item(item_id, profile_from_record(body, source="manual"))
        return _view(request, session_id, session)

    @app.delete("/compositions/{session_id}/items/{item_id}")
    async def remove_item(
        session_id: UUID, item_id: UUID, request: Request
    ) -> CompositionView:
        """Remove an item from the composition."""
        session = _session(request, session_id)
        session.remove_item(item_id)
        return _view(request, session_id, session)

    @app.post("/compositions/{session_id}/multiplier")
    async def set_multiplier(
        session_id: UUID, body: QuantityRequest, request: Request
    ) -> CompositionView:
        """Scale the whole composition relative to its original weight."""
        session = _session(request, session_id)
        session.set_session_multiplier(body.quantity)
        return _view(request, session_id, session)

    @app.post("/compositions/{session_id}/reset")
    async def reset(session_id: UUID, request: Request) -> CompositionView:
        """Restore the composition to its original state."""
        session = _session(request, session_id)
        session.reset_to_original()
        return _view(request, session_id, session)

    @app.put("/compositions/{session_id}/name")
    async def rename(
        session_id: UUID, body: RenameRequest, request: Request
    ) -> CompositionView:
        """Override the automatic display name."""
        session = _session(request, session_id)
        session.rename(body.name)
        return _view(request, session_id, session)

    @app.post("/compositions/{session_id}/save")
    async def save(
        session_id: UUID, body: SaveRequest, request: Request
    ) -> dict[str, object]:
        """Log the composition as a meal."""
        state_container: AppContainer = request.app.state.container
        session = _session(request, session_id)
        if not session.items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Composition is empty"
            )
        photo: PhotoComposition | None = request.app.state.photo_compositions.get(
            session_id
        )
        meal_type = body.meal_type or (photo.meal_type if photo else MealType.LUNCH)
        notes = body.notes
        if notes is None and photo is not None:
            notes = photo.notes
        saved = state_container.meal_log_service.save_session(
            body.user_id,
            session,
            meal_type,
            is_ai_analyzed=photo is not None,
            notes=notes,
        )
        state_container.session_store.discard(session_id)
        request.app.state.photo_compositions.pop(session_id, None)
        return {
            "meal_id": str(saved.meal_id),
            "total_calories": saved.record.total_calories,
            "is_compound": saved.record.is_compound,
        }

    @app.post("/compositions/{session_id}/items/{item_id}/custom-food")
    async def save_custom_food(
        session_id: UUID, item_id: UUID, body: CustomFoodRequest, request: Request
    ) -> ProfileView:
        """Save an item's current portion as a per-100 g custom food."""
        state_container: AppContainer = request.app.state.container
        item = _session(request, session_id).get_item(item_id)
        food = state_container.custom_food_service.save_from_item(
            body.user_id, item, body.name
        )
        return ProfileView(
            name=food.name,
            reference_portion_grams=100.0,
            source="custom",
            custom_food_id=food.id,
            calories=food.base_calories,
            protein_g=food.base_protein_g,
            carbs_g=food.base_carbs_g,
            fat_g=food.base_fat_g,
            fiber_g=food.base_fiber_g,
        )

    @app.get("/foods/search")
    async def search_foods(
        query: str, request: Request, limit: int = 10
    ) -> list[ProfileView]:
        """Search the food index."""
        state_container: AppContainer = request.app.state.container
        try:
            profiles = await state_container.food_search_service.search(query, limit)
        except Exception as exc:
            logger.exception("Food search failed for %s", query)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY) from exc
        return [_profile_view(profile) for profile in profiles]

    @app.get("/custom-foods")
    async def list_custom_foods(user_id: UUID, request: Request) -> list[ProfileView]:
        """List a user's custom foods (per 100 g)."""
        state_container: AppContainer = request.app.state.container
        profiles = state_container.custom_food_service.list_profiles(user_id)
        return [_profile_view(profile) for profile in profiles]

    return app


def _session(request: Request, session_id: UUID) -> CompositionSession:
    return request.app.state.container.session_store.get(session_id)


def _add(
    session: CompositionSession, profile: ReferenceProfile, quantity: str | None
) -> None:
    item = session.add_item(profile)
    if quantity is not None:
        session.set_item_quantity(item.id, quantity)


def _nutrients_view(values: NutrientValues) -> NutrientsView:
    return NutrientsView(
        calories=values.calories,
        protein_g=values.protein_g,
        carbs_g=values.carbs_g,
        fat_g=values.fat_g,
        fiber_g=values.fiber_g,
    )


def _item_view(item: CompositionItem) -> ItemView:
    return ItemView(
        id=item.id,
        name=item.profile.name,
        reference_portion_grams=item.profile.reference_portion_grams,
        reference=_nutrients_view(item.profile.nutrients),
        current_portion_grams=item.current_portion_grams,
        display_quantity=item.display_quantity,
        nutrients=_nutrients_view(item.nutrients),
    )


def _profile_view(profile: ReferenceProfile) -> ProfileView:
    return ProfileView(
        name=profile.name,
        reference_portion_grams=profile.reference_portion_grams,
        source=profile.source,
        custom_food_id=profile.custom_food_id,
        calories=profile.calories,
        protein_g=profile.protein_g,
        carbs_g=profile.carbs_g,
        fat_g=profile.fat_g,
        fiber_g=profile.fiber_g,
    )


def _view(
    request: Request, session_id: UUID, session: CompositionSession
) -> CompositionView:
    composition = session.finalize()
    totals = composition.totals
    photo: PhotoComposition | None = request.app.state.photo_compositions.get(
        session_id
    )
    return CompositionView(
        id=session_id,
        status=session.status.value,
        name=composition.name,
        session_multiplier=session.session_multiplier,
        is_compound=composition.is_compound,
        items=[_item_view(item) for item in composition.items],
        totals=TotalsView(
            calories=totals.calories,
            protein_g=totals.protein_g,
            carbs_g=totals.carbs_g,
            fat_g=totals.fat_g,
            fiber_g=totals.fiber_g,
            portion_grams=totals.portion_grams,
        ),
        meal_type=photo.meal_type if photo else None,
        notes=photo.notes if photo else None,
    )
