# Hypermedia links
#
# Links are only added when the client negotiated the hypermedia media type,
# otherwise the "links" key is absent from the response.
# Link generation is best effort: a link that can't be built is logged and left out.
#
from dataclasses import dataclass
from flask import url_for
from werkzeug.routing import BuildError
import devhabit

# endpoint names, cfr. DevHabitAPI.expose_resources
HABITS_ENDPOINT = "habits"
HABIT_ENDPOINT = "habit"
HABIT_TAGS_ENDPOINT = "habit_tags"
TAGS_ENDPOINT = "tags"
TAG_ENDPOINT = "tag"


@dataclass(frozen=True)
class LinkDescriptor:
    href: str
    rel: str
    method: str


def create_link(endpoint, rel, method, **values):
    """
    :param endpoint: flask endpoint name
    :param rel: link relation, e.g. "self"
    :param method: http method
    :param values: url parameters, None values are left out
    :return: LinkDescriptor or None if no url could be built
    """
    values = {key: value for key, value in values.items() if value not in (None, "")}
    try:
        href = url_for(endpoint, _external=True, **values)
    except (BuildError, ValueError) as exc:
        devhabit.log.warning(f"Failed to create '{rel}' link for {endpoint} {values}: {exc}")
        return None
    return LinkDescriptor(href, rel, method)


def attach_links(target, links, wants_hypermedia):
    """
    :param target: shaped record or collection envelope (dict)
    :param links: list of LinkDescriptor (None items are ignored) or a callable returning one
    :param wants_hypermedia: the request content negotiation result
    :return: target, with a "links" item if hypermedia was requested
    """
    if not wants_hypermedia:
        return target
    if callable(links):
        links = links()
    target["links"] = [link for link in links if link is not None]
    return target


def habit_links(habit_id, fields=None):
    return [
        create_link(HABIT_ENDPOINT, "self", "GET", habit_id=habit_id, fields=fields),
        create_link(HABIT_ENDPOINT, "update", "PUT", habit_id=habit_id),
        create_link(HABIT_ENDPOINT, "partial-update", "PATCH", habit_id=habit_id),
        create_link(HABIT_ENDPOINT, "delete", "DELETE", habit_id=habit_id),
        create_link(HABIT_TAGS_ENDPOINT, "upsert-tags", "PUT", habit_id=habit_id),
    ]


def tag_links(tag_id, fields=None):
    return [
        create_link(TAG_ENDPOINT, "self", "GET", tag_id=tag_id, fields=fields),
        create_link(TAG_ENDPOINT, "update", "PUT", tag_id=tag_id),
        create_link(TAG_ENDPOINT, "delete", "DELETE", tag_id=tag_id),
    ]


def collection_links(endpoint, metadata, **query_args):
    """
    :param endpoint: collection endpoint name
    :param metadata: PaginationMetadata of the current page
    :param query_args: query arguments to be repeated in the links (sort, fields, filters)
    :return: list of links
    """
    page_size = metadata.page_size
    links = [
        create_link(endpoint, "self", "GET", page=metadata.page, pageSize=page_size, **query_args),
        create_link(endpoint, "create", "POST"),
    ]
    if metadata.has_next_page:
        links.append(create_link(endpoint, "next-page", "GET", page=metadata.page + 1, pageSize=page_size, **query_args))
    if metadata.has_previous_page:
        links.append(create_link(endpoint, "previous-page", "GET", page=metadata.page - 1, pageSize=page_size, **query_args))
    return links
