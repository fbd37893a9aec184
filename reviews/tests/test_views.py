from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from campusdeals.jwt_utils import generate_test_token
from reviews.models import Review
from users.models import User

LONG_TEXT = "Quick reply, fair price and the bike works perfectly."


class ReviewEndpointsTest(APITestCase):
    def setUp(self):
        self.seller = User.objects.create(name="Seller", email="seller@campus.test")
        self.buyer = User.objects.create(name="Buyer", email="buyer@campus.test")
        self.authenticate(self.buyer)
        self.list_url = reverse('reviews:user-reviews', kwargs={'user_id': self.seller.id})

    def authenticate(self, user):
        token = generate_test_token(user.id, email=user.email)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def test_create_and_list(self):
        response = self.client.post(self.list_url, {'rating': 'positive', 'review': LONG_TEXT}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Review created successfully')
        self.assertEqual(response.data['data']['reviewerId'], self.buyer.id)

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['meta']['total'], 1)
        self.assertEqual(response.data['stats'], {'positive': 1, 'neutral': 0, 'negative': 0, 'total': 1})

    def test_user_detail_carries_stats(self):
        self.client.post(self.list_url, {'rating': 'negative', 'review': LONG_TEXT}, format='json')
        response = self.client.get(reverse('users:user-detail', kwargs={'user_id': self.seller.id}))
        self.assertEqual(response.data['data']['reviewStats']['negative'], 1)

    def test_short_review_rejected(self):
        response = self.client.post(self.list_url, {'rating': 'positive', 'review': 'ok'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'][0]['field'], 'review')

    def test_invalid_rating(self):
        response = self.client.post(self.list_url, {'rating': 'stellar', 'review': LONG_TEXT}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_self_review(self):
        url = reverse('reviews:user-reviews', kwargs={'user_id': self.buyer.id})
        response = self.client.post(url, {'rating': 'positive', 'review': LONG_TEXT}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'You cannot review yourself')

    def test_update_and_delete_by_author(self):
        review = Review.objects.create(reviewer=self.buyer, reviewee=self.seller, rating='neutral', review=LONG_TEXT)
        url = reverse('reviews:review-detail', kwargs={'review_id': review.id})

        response = self.client.put(url, {'rating': 'positive'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['rating'], 'positive')

        response = self.client.delete(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Review.objects.exists())

    def test_other_user_cannot_edit(self):
        review = Review.objects.create(reviewer=self.buyer, reviewee=self.seller, rating='neutral', review=LONG_TEXT)
        url = reverse('reviews:review-detail', kwargs={'review_id': review.id})
        self.authenticate(self.seller)

        response = self.client.put(url, {'rating': 'negative'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Not allowed to update this review')

        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['rating'], 'neutral')

    def test_review_not_found(self):
        response = self.client.get(reverse('reviews:review-detail', kwargs={'review_id': 4040}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
