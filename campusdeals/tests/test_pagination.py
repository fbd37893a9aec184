from django.test import SimpleTestCase, TestCase, override_settings

from campusdeals.exceptions import InvalidArgument
from campusdeals.pagination import (
    QueryPolicy,
    build_search_filter,
    list_resource,
    parse_bool,
    parse_positive_int,
    sanitize_search,
    validate_pagination_params,
    validate_sort_params,
)
from users.models import User
from users.services import USER_QUERY


class PaginationParamsTest(SimpleTestCase):
    def test_defaults_when_missing(self):
        params = validate_pagination_params()
        self.assertEqual(params.page, 1)
        self.assertEqual(params.limit, 10)
        self.assertEqual(params.offset, 0)

    def test_blank_values_use_defaults(self):
        params = validate_pagination_params(' ', '')
        self.assertEqual((params.page, params.limit), (1, 10))

    def test_resource_default_limit(self):
        self.assertEqual(validate_pagination_params(default_limit=50).limit, 50)

    def test_limit_is_clamped_to_maximum(self):
        self.assertEqual(validate_pagination_params('1', '1000').limit, 100)

    def test_page_zero_floors_to_one(self):
        params = validate_pagination_params('0', '20')
        self.assertEqual(params.page, 1)
        self.assertEqual(params.offset, 0)

    def test_limit_zero_clamps_to_minimum(self):
        self.assertEqual(validate_pagination_params(1, 0).limit, 1)

    def test_offset(self):
        params = validate_pagination_params('3', '20')
        self.assertEqual(params.offset, 40)

    def test_non_numeric_page_is_rejected(self):
        with self.assertRaises(InvalidArgument) as ctx:
            validate_pagination_params('abc', '10')
        self.assertEqual(ctx.exception.errors[0]['field'], 'page')

    def test_non_numeric_limit_is_rejected(self):
        with self.assertRaises(InvalidArgument):
            validate_pagination_params('1', '10.5')

    @override_settings(PAGINATION={'MAX_LIMIT': 25})
    def test_max_limit_from_settings(self):
        self.assertEqual(validate_pagination_params(1, 500).limit, 25)


class SortParamsTest(SimpleTestCase):
    policy = QueryPolicy(allowed_sort_fields=('id', 'name', 'createdAt'))

    def test_defaults(self):
        self.assertEqual(validate_sort_params(None, None, self.policy), ('createdAt', 'desc'))

    def test_order_is_case_insensitive(self):
        self.assertEqual(validate_sort_params('name', 'ASC', self.policy), ('name', 'asc'))

    def test_unknown_sort_field_names_allowed_set(self):
        with self.assertRaises(InvalidArgument) as ctx:
            validate_sort_params('dropTable', 'asc', self.policy)
        self.assertIn('id, name, createdAt', ctx.exception.message)

    def test_invalid_order(self):
        with self.assertRaises(InvalidArgument):
            validate_sort_params('name', 'sideways', self.policy)

    def test_order_field_mapping(self):
        self.assertEqual(USER_QUERY.order_field('createdAt'), 'created_at')
        self.assertEqual(USER_QUERY.order_field('name'), 'name')


class SearchAndParsingTest(SimpleTestCase):
    def test_sanitize_search(self):
        self.assertEqual(sanitize_search(None), '')
        self.assertEqual(sanitize_search(42), '')
        self.assertEqual(sanitize_search('  phone  '), 'phone')
        self.assertEqual(len(sanitize_search('x' * 500)), 100)

    def test_build_search_filter(self):
        self.assertIsNone(build_search_filter('', ('name',)))
        self.assertIsNone(build_search_filter('bike', ()))
        condition = build_search_filter('bike', ('title', 'description'))
        self.assertEqual(condition.connector, 'OR')
        self.assertEqual(len(condition.children), 2)

    def test_parse_bool(self):
        self.assertIsNone(parse_bool(None, 'flag'))
        self.assertTrue(parse_bool('TRUE', 'flag'))
        self.assertFalse(parse_bool('false', 'flag'))
        with self.assertRaises(InvalidArgument):
            parse_bool('maybe', 'flag')

    def test_parse_positive_int(self):
        self.assertIsNone(parse_positive_int('', 'campusId'))
        self.assertEqual(parse_positive_int('7', 'campusId'), 7)
        with self.assertRaises(InvalidArgument):
            parse_positive_int('0', 'campusId')
        with self.assertRaises(InvalidArgument):
            parse_positive_int('seven', 'campusId')


class ListResourceTest(TestCase):
    def setUp(self):
        for i in range(25):
            User.objects.create(name=f"User {i:02d}", email=f"user{i}@campus.test")

    def serialize(self, user):
        return user.id

    def test_meta_block(self):
        result = list_resource(User.objects.all(), USER_QUERY, {'page': '2', 'limit': '10'}, self.serialize)
        meta = result['meta']
        self.assertEqual(meta['total'], 25)
        self.assertEqual(meta['page'], 2)
        self.assertEqual(meta['limit'], 10)
        self.assertEqual(meta['totalPages'], 3)
        self.assertTrue(meta['hasNext'])
        self.assertTrue(meta['hasPrev'])
        self.assertEqual(meta['query'], {'search': None, 'sortBy': 'createdAt', 'order': 'desc', 'filters': None})
        self.assertEqual(len(result['data']), 10)

    def test_last_page(self):
        result = list_resource(User.objects.all(), USER_QUERY, {'page': '3', 'limit': '10'}, self.serialize)
        self.assertEqual(len(result['data']), 5)
        self.assertFalse(result['meta']['hasNext'])

    def test_page_past_the_end_is_empty(self):
        result = list_resource(User.objects.all(), USER_QUERY, {'page': '9'}, self.serialize)
        self.assertEqual(result['data'], [])
        self.assertEqual(result['meta']['total'], 25)

    def test_pages_are_stable_when_sort_values_tie(self):
        User.objects.update(name='Same')
        seen = []
        for page in (1, 2, 3):
            result = list_resource(
                User.objects.all(), USER_QUERY,
                {'page': page, 'limit': 10, 'sortBy': 'name', 'order': 'asc'}, self.serialize,
            )
            seen.extend(result['data'])
        self.assertEqual(seen, sorted(User.objects.values_list('id', flat=True)))

    def test_descending_ties_break_by_newest_id(self):
        User.objects.update(name='Same')
        result = list_resource(
            User.objects.all(), USER_QUERY,
            {'limit': 100, 'sortBy': 'name', 'order': 'desc'}, self.serialize,
        )
        self.assertEqual(result['data'], sorted(User.objects.values_list('id', flat=True), reverse=True))

    def test_search_counts_with_same_predicate(self):
        result = list_resource(User.objects.all(), USER_QUERY, {'search': 'User 1'}, self.serialize)
        self.assertEqual(result['meta']['total'], 10)
        self.assertEqual(result['meta']['query']['search'], 'User 1')

    def test_invalid_sort_rejected_without_querying(self):
        with self.assertNumQueries(0):
            with self.assertRaises(InvalidArgument):
                list_resource(User.objects.all(), USER_QUERY, {'sortBy': 'dropTable'}, self.serialize)

    def test_empty_result(self):
        result = list_resource(User.objects.none(), USER_QUERY, {}, self.serialize)
        self.assertEqual(result['meta']['total'], 0)
        self.assertEqual(result['meta']['totalPages'], 0)
        self.assertFalse(result['meta']['hasNext'])
        self.assertFalse(result['meta']['hasPrev'])
