#  This file contains the flask-restful "Resource" objects:
#  - HabitsAPI, HabitAPI and HabitTagsAPI for the habits collection, its instances and their tags
#  - TagsAPI and TagAPI for the tags
#  - UserAPI for the users
#
#  Collection GET requests follow the pipeline:
#  parse sort -> filter -> order -> paginate -> map to dtos -> shape -> links -> envelope
#
# pylint: disable=redefined-builtin,invalid-name, line-too-long
#
from http import HTTPStatus
from flask import jsonify, make_response as flask_make_response, request, url_for
from flask_restful_swagger_2 import Resource as FRSResource, swagger
from sqlalchemy import or_
from .config import get_config
from .dtos import CreateHabitDto, CreateTagDto, HabitDto, HabitWithTagsDto, TagDto, UpdateHabitDto, UpdateTagDto, UpsertHabitTagsDto
from .errors import ConflictError, NotFoundError, ValidationError
from .links import HABITS_ENDPOINT, HABIT_ENDPOINT, TAGS_ENDPOINT, TAG_ENDPOINT
from .links import attach_links, collection_links, habit_links, tag_links
from .mappings import create_habit_entity, create_tag_entity, habit_to_dto, habit_with_tags_to_dto, patch_habit
from .mappings import tag_to_dto, update_habit_from_dto, update_tag_from_dto, user_to_dto
from .models import DB, Habit, HabitStatus, HabitTag, HabitType, Tag, User
from .pagination import PaginationMetadata, build_page, paginate
from .shaping import field_shaper


def make_response(*args, **kwargs):
    """
    Customized flask make_response
    """
    response = flask_make_response(*args, **kwargs)
    if request.wants_hypermedia and response.is_json:
        # Only use the hypermedia media type if the client asked for it
        response.headers["Content-Type"] = get_config("HATEOAS_MEDIA_TYPE")
    return response


def no_content():
    return make_response("", HTTPStatus.NO_CONTENT)


def _parameter(name, description, type="string"):
    return {"name": name, "in": "query", "type": type, "required": False, "description": description}


COLLECTION_PARAMETERS = [
    _parameter("sort", "Sort order, e.g. 'name asc,createdAtUtc desc'"),
    _parameter("fields", "Fields to include (csv)"),
    _parameter("page", "Page number, starting at 1", "integer"),
    _parameter("pageSize", "Number of items per page", "integer"),
]


class Resource(FRSResource):
    """
    Superclass for the exposed endpoints

    sort_mappings is set by DevHabitAPI when the resource is exposed
    """

    sort_mappings = None
    # the DTO class that is shaped and sorted
    shape = None

    def get_collection(self, query, endpoint, **query_args):
        """
        Sort, paginate, shape and link a filtered collection query

        :param query: filtered sqla query object
        :param endpoint: collection endpoint name, used for the links
        :param query_args: filter query arguments to be repeated in the links
        :return: collection envelope
        """
        fields = request.fields
        clauses = self.sort_mappings.parse_sort(request.sort, self.shape)
        field_shaper.validate_fields(fields, self.shape)
        page, page_size = request.page, request.page_size

        query = self.sort_mappings.apply_ordering(query, clauses, self.shape)
        instances, count = paginate(query, page, page_size)

        dtos = [self.to_dto(instance) for instance in instances]
        items = field_shaper.shape_fields(dtos, fields, self.shape)
        for item, dto in zip(items, dtos):
            attach_links(item, lambda: self.instance_links(dto.id, fields), request.wants_hypermedia)

        metadata = PaginationMetadata(page, page_size, count)
        result = build_page(items, page, page_size, count)
        query_args.update(sort=request.sort, fields=fields)
        attach_links(result, lambda: collection_links(endpoint, metadata, **query_args), request.wants_hypermedia)
        return result

    def get_instance_document(self, dto, shape=None):
        """
        :param dto: DTO of the requested instance
        :return: shaped dto with links
        """
        fields = request.fields
        result = field_shaper.shape_data(dto, fields, shape or self.shape)
        return attach_links(result, lambda: self.instance_links(dto.id, fields), request.wants_hypermedia)

    @staticmethod
    def to_dto(instance):
        raise NotImplementedError

    @staticmethod
    def instance_links(instance_id, fields=None):
        return []


def get_habit(habit_id):
    habit = DB.session.get(Habit, habit_id)
    if habit is None:
        raise NotFoundError(f"Habit '{habit_id}' not found")
    return habit


def get_tag(tag_id):
    tag = DB.session.get(Tag, tag_id)
    if tag is None:
        raise NotFoundError(f"Tag '{tag_id}' not found")
    return tag


def _parse_enum_filter(name, enum_cls):
    value = request.args.get(name, "").strip()
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid '{name}' filter: '{value}'")


class HabitsAPI(Resource):
    """
    /habits : the habits collection
    """

    shape = HabitDto
    to_dto = staticmethod(habit_to_dto)
    instance_links = staticmethod(habit_links)

    @swagger.doc(
        {
            "tags": ["habits"],
            "description": "Retrieve a page of habits",
            "parameters": COLLECTION_PARAMETERS
            + [
                _parameter("q", "Search the habit name and description"),
                _parameter("type", "Habit type filter: Binary, Measurable"),
                _parameter("status", "Habit status filter: Ongoing, Completed"),
            ],
            "responses": {"200": {"description": "Request fulfilled, document follows"}, "400": {"description": "Invalid query parameter"}},
        }
    )
    def get(self, **kwargs):
        """
        HTTP GET: return a page of habits
        """
        search = request.args.get("q", "").strip()
        habit_type = _parse_enum_filter("type", HabitType)
        status = _parse_enum_filter("status", HabitStatus)

        query = DB.session.query(Habit)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Habit.name.ilike(pattern), Habit.description.ilike(pattern)))
        if habit_type is not None:
            query = query.filter(Habit.type == habit_type)
        if status is not None:
            query = query.filter(Habit.status == status)

        result = self.get_collection(
            query,
            HABITS_ENDPOINT,
            q=search,
            type=habit_type.value if habit_type else None,
            status=status.value if status else None,
        )
        return make_response(jsonify(result))

    @swagger.doc({"tags": ["habits"], "description": "Create a habit", "responses": {"201": {"description": "Created"}, "400": {"description": "Invalid payload"}}})
    def post(self, **kwargs):
        """
        HTTP POST: create a habit, the new habit is returned with a Location header
        """
        dto = CreateHabitDto.from_json(request.get_json_payload())
        habit = create_habit_entity(dto)
        DB.session.add(habit)
        DB.session.flush()

        result = field_shaper.shape_data(habit_to_dto(habit))
        attach_links(result, lambda: habit_links(habit.id), request.wants_hypermedia)
        response = make_response(jsonify(result), HTTPStatus.CREATED)
        response.headers["Location"] = url_for(HABIT_ENDPOINT, habit_id=habit.id, _external=True)
        return response


class HabitAPI(Resource):
    """
    /habits/<habit_id> : a single habit, including its tag names
    """

    shape = HabitWithTagsDto
    instance_links = staticmethod(habit_links)

    @swagger.doc(
        {
            "tags": ["habits"],
            "description": "Retrieve a habit",
            "parameters": [{"name": "habit_id", "in": "path", "type": "string", "required": True, "description": "Habit id"}, _parameter("fields", "Fields to include (csv)")],
            "responses": {"200": {"description": "Request fulfilled, document follows"}, "404": {"description": "Not Found"}},
        }
    )
    def get(self, habit_id, **kwargs):
        field_shaper.validate_fields(request.fields, self.shape)
        habit = get_habit(habit_id)
        return make_response(jsonify(self.get_instance_document(habit_with_tags_to_dto(habit))))

    @swagger.doc({"tags": ["habits"], "description": "Replace a habit", "responses": {"204": {"description": "No Content"}, "404": {"description": "Not Found"}}})
    def put(self, habit_id, **kwargs):
        dto = UpdateHabitDto.from_json(request.get_json_payload())
        habit = get_habit(habit_id)
        update_habit_from_dto(habit, dto)
        return no_content()

    @swagger.doc({"tags": ["habits"], "description": "Update some of the habit attributes", "responses": {"204": {"description": "No Content"}, "404": {"description": "Not Found"}}})
    def patch(self, habit_id, **kwargs):
        """
        The payload is a json object with the attributes to be modified, e.g. {"name": "Read", "isArchived": true}
        """
        payload = request.get_json_payload()
        habit = get_habit(habit_id)
        patch_habit(habit, payload)
        return no_content()

    @swagger.doc({"tags": ["habits"], "description": "Delete a habit", "responses": {"204": {"description": "No Content"}, "404": {"description": "Not Found"}}})
    def delete(self, habit_id, **kwargs):
        habit = get_habit(habit_id)
        DB.session.delete(habit)
        return no_content()


class HabitTagsAPI(Resource):
    """
    /habits/<habit_id>/tags : the tags of a habit
    """

    @swagger.doc({"tags": ["habits"], "description": "Replace the tags of a habit", "responses": {"204": {"description": "No Content"}, "400": {"description": "Unknown tag"}}})
    def put(self, habit_id, **kwargs):
        """
        The payload {"tagIds": [...]} contains the complete set of tag ids
        """
        dto = UpsertHabitTagsDto.from_json(request.get_json_payload())
        habit = get_habit(habit_id)

        current_ids = {habit_tag.tag_id for habit_tag in habit.habit_tags}
        if current_ids == set(dto.tag_ids):
            return no_content()

        existing_ids = {tag_id for (tag_id,) in DB.session.query(Tag.id).filter(Tag.id.in_(dto.tag_ids))}
        missing = [tag_id for tag_id in dto.tag_ids if tag_id not in existing_ids]
        if missing:
            raise ValidationError(f"Unknown tag ids: {', '.join(missing)}")

        habit.habit_tags = [habit_tag for habit_tag in habit.habit_tags if habit_tag.tag_id in existing_ids]
        for tag_id in dto.tag_ids:
            if tag_id not in current_ids:
                habit.habit_tags.append(HabitTag(habit_id=habit.id, tag_id=tag_id))
        return no_content()


class TagsAPI(Resource):
    """
    /tags : the tags collection
    """

    shape = TagDto
    to_dto = staticmethod(tag_to_dto)
    instance_links = staticmethod(tag_links)

    @swagger.doc({"tags": ["tags"], "description": "Retrieve a page of tags", "parameters": COLLECTION_PARAMETERS, "responses": {"200": {"description": "Request fulfilled, document follows"}}})
    def get(self, **kwargs):
        result = self.get_collection(DB.session.query(Tag), TAGS_ENDPOINT)
        return make_response(jsonify(result))

    @swagger.doc({"tags": ["tags"], "description": "Create a tag", "responses": {"201": {"description": "Created"}, "409": {"description": "Conflict"}}})
    def post(self, **kwargs):
        dto = CreateTagDto.from_json(request.get_json_payload())
        if DB.session.query(Tag).filter(Tag.name == dto.name).first() is not None:
            raise ConflictError(f"The tag '{dto.name}' already exists")
        tag = create_tag_entity(dto)
        DB.session.add(tag)
        DB.session.flush()

        result = field_shaper.shape_data(tag_to_dto(tag))
        attach_links(result, lambda: tag_links(tag.id), request.wants_hypermedia)
        response = make_response(jsonify(result), HTTPStatus.CREATED)
        response.headers["Location"] = url_for(TAG_ENDPOINT, tag_id=tag.id, _external=True)
        return response


class TagAPI(Resource):
    """
    /tags/<tag_id> : a single tag
    """

    shape = TagDto
    instance_links = staticmethod(tag_links)

    @swagger.doc({"tags": ["tags"], "description": "Retrieve a tag", "responses": {"200": {"description": "Request fulfilled, document follows"}, "404": {"description": "Not Found"}}})
    def get(self, tag_id, **kwargs):
        field_shaper.validate_fields(request.fields, self.shape)
        tag = get_tag(tag_id)
        return make_response(jsonify(self.get_instance_document(tag_to_dto(tag))))

    @swagger.doc({"tags": ["tags"], "description": "Update a tag", "responses": {"204": {"description": "No Content"}, "409": {"description": "Conflict"}}})
    def put(self, tag_id, **kwargs):
        dto = UpdateTagDto.from_json(request.get_json_payload())
        tag = get_tag(tag_id)
        if DB.session.query(Tag).filter(Tag.name == dto.name, Tag.id != tag.id).first() is not None:
            raise ConflictError(f"The tag '{dto.name}' already exists")
        update_tag_from_dto(tag, dto)
        return no_content()

    @swagger.doc({"tags": ["tags"], "description": "Delete a tag", "responses": {"204": {"description": "No Content"}, "404": {"description": "Not Found"}}})
    def delete(self, tag_id, **kwargs):
        tag = get_tag(tag_id)
        DB.session.delete(tag)
        return no_content()


class UserAPI(Resource):
    """
    /users/<user_id>
    """

    @swagger.doc({"tags": ["users"], "description": "Retrieve a user", "responses": {"200": {"description": "Request fulfilled, document follows"}, "404": {"description": "Not Found"}}})
    def get(self, user_id, **kwargs):
        user = DB.session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return make_response(jsonify(user_to_dto(user)))
