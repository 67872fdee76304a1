from django import forms


class SearchForm(forms.Form):
    query = forms.CharField(
        max_length=200,
        required=True,
        strip=True,
        widget=forms.TextInput(attrs={
            'placeholder': 'Search news and magazines',
            'class': 'search-input'
        })
    )
